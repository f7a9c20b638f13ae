"""Tests for the client stub builder."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from grpcgen.gen import ArtifactKind, Decl, build_client, plain
from grpcgen.model import Method, ProtoFile
from grpcgen.options import GenerationMode

MethodFactory = Callable[..., Method]
FileFactory = Callable[..., ProtoFile]


def _kinds(decls: list[Decl], kind: ArtifactKind) -> list[Decl]:
    return [d for d in decls if d.kind is kind]


def _by_name(decls: list[Decl], name: str) -> Decl:
    return next(d for d in decls if d.name == name)


class TestClientSurface:
    """Tests for the interface, struct and constructor."""

    def test_interface_lists_methods_in_order(self, greeter_file: ProtoFile) -> None:
        """The client interface has one entry per method, in declaration order."""
        decls = build_client(greeter_file.services[0], GenerationMode.FULL)
        iface = _by_name(decls, "GreeterClient")
        assert iface.kind is ArtifactKind.CLIENT_INTERFACE
        assert iface.member_names == ["SayHello", "Subscribe", "Upload", "Chat", "SayGoodbye"]

    def test_signatures_by_shape(self, greeter_file: ProtoFile) -> None:
        """Streaming-request methods omit ``in``; streaming methods return a stream type."""
        iface = _by_name(build_client(greeter_file.services[0], GenerationMode.FULL), "GreeterClient")
        assert plain(iface.member("SayHello").signature) == (
            "SayHello(ctx Context, in *HelloRequest, opts ...CallOption) (*HelloReply, error)"
        )
        assert plain(iface.member("Subscribe").signature) == (
            "Subscribe(ctx Context, in *HelloRequest, opts ...CallOption) (Greeter_SubscribeClient, error)"
        )
        assert plain(iface.member("Upload").signature) == (
            "Upload(ctx Context, opts ...CallOption) (Greeter_UploadClient, error)"
        )
        assert plain(iface.member("Chat").signature) == "Chat(ctx Context, opts ...CallOption) (Greeter_ChatClient, error)"

    def test_comments_and_deprecation_carried(self, greeter_file: ProtoFile) -> None:
        """Leading comments and deprecation flags reach interface members."""
        iface = _by_name(build_client(greeter_file.services[0], GenerationMode.FULL), "GreeterClient")
        assert iface.member("SayHello").comments == " Sends a greeting\n"
        assert iface.member("SayGoodbye").deprecated
        assert not iface.member("SayHello").deprecated

    def test_struct_and_constructor(self, greeter_file: ProtoFile) -> None:
        """The implementation struct wraps a connection; the constructor returns it."""
        decls = build_client(greeter_file.services[0], GenerationMode.FULL)
        struct = _by_name(decls, "greeterClient")
        assert struct.member_names == ["cc"]
        ctor = _by_name(decls, "NewGreeterClient")
        assert plain(ctor.header) == "func NewGreeterClient(cc ClientConnInterface) GreeterClient {"
        assert ctor.body_text() == "return &greeterClient{cc}"

    def test_deprecated_service_marks_interface_and_constructor(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """A deprecated service deprecates its client interface and constructor."""
        file = make_file(make_method("A"), deprecated=True)
        decls = build_client(file.services[0], GenerationMode.FULL)
        assert _by_name(decls, "GreeterClient").deprecated
        assert _by_name(decls, "NewGreeterClient").deprecated
        assert not _by_name(decls, "greeterClient").deprecated

    def test_migration_mode_emits_nothing(self, greeter_file: ProtoFile) -> None:
        """No client declarations exist in migration-lite mode."""
        assert build_client(greeter_file.services[0], GenerationMode.MIGRATION_LITE) == []


class TestClientMethods:
    """Tests for per-method client implementations."""

    def test_unary_invokes(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """Unary methods call Invoke with the full method path."""
        file = make_file(make_method("SayHello"))
        decls = build_client(file.services[0], GenerationMode.FULL)
        method = _kinds(decls, ArtifactKind.CLIENT_METHOD)[0]
        assert 'c.cc.Invoke(ctx, "/helloworld.Greeter/SayHello", in, out, opts...)' in method.body_text()
        assert _kinds(decls, ArtifactKind.CLIENT_STREAM_DESC) == []
        assert _kinds(decls, ArtifactKind.CLIENT_STREAM_INTERFACE) == []

    def test_server_streaming_sends_and_closes(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """A single-request stream sends the request and half-closes."""
        file = make_file(make_method("Subscribe", server_streaming=True))
        decls = build_client(file.services[0], GenerationMode.FULL)
        body = _kinds(decls, ArtifactKind.CLIENT_METHOD)[0].body_text()
        assert 'c.cc.NewStream(ctx, greeterSubscribeStreamDesc, "/helloworld.Greeter/Subscribe", opts...)' in body
        assert "x.ClientStream.SendMsg(in)" in body
        assert "x.ClientStream.CloseSend()" in body

    @pytest.mark.parametrize(("client_streaming", "server_streaming"), [(True, False), (True, True)])
    def test_client_streaming_does_not_send(
        self,
        make_method: MethodFactory,
        make_file: FileFactory,
        client_streaming: bool,
        server_streaming: bool,
    ) -> None:
        """Methods with a streaming request hand back the stream untouched."""
        file = make_file(make_method("M", client_streaming=client_streaming, server_streaming=server_streaming))
        body = _kinds(build_client(file.services[0], GenerationMode.FULL), ArtifactKind.CLIENT_METHOD)[0].body_text()
        assert "SendMsg" not in body
        assert "CloseSend" not in body

    def test_stream_desc_flags(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """Stream descriptors carry the proto method name and both flags."""
        file = make_file(make_method("Chat", client_streaming=True, server_streaming=True))
        desc = _kinds(build_client(file.services[0], GenerationMode.FULL), ArtifactKind.CLIENT_STREAM_DESC)[0]
        assert desc.name == "greeterChatStreamDesc"
        assert desc.body_text() == 'StreamName: "Chat",\nServerStreams: true,\nClientStreams: true,'


class TestClientStreamTypes:
    """Tests for the client stream wrapper operations by shape."""

    @pytest.mark.parametrize(
        ("client_streaming", "server_streaming", "expected"),
        [
            (False, True, ["Recv", "ClientStream"]),
            (True, False, ["Send", "CloseAndRecv", "ClientStream"]),
            (True, True, ["Send", "Recv", "ClientStream"]),
        ],
        ids=["server_streaming", "client_streaming", "bidi"],
    )
    def test_operations(
        self,
        make_method: MethodFactory,
        make_file: FileFactory,
        client_streaming: bool,
        server_streaming: bool,
        expected: list[str],
    ) -> None:
        """Each shape exposes exactly its stream operations."""
        file = make_file(make_method("M", client_streaming=client_streaming, server_streaming=server_streaming))
        decls = build_client(file.services[0], GenerationMode.FULL)
        iface = _kinds(decls, ArtifactKind.CLIENT_STREAM_INTERFACE)[0]
        assert iface.name == "Greeter_MClient"
        assert iface.member_names == expected
        methods = [d.name for d in _kinds(decls, ArtifactKind.CLIENT_STREAM_METHOD)]
        assert methods == expected[:-1]

    def test_close_and_recv_half_closes_first(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """CloseAndRecv closes the send side before receiving."""
        file = make_file(make_method("Upload", client_streaming=True))
        decls = build_client(file.services[0], GenerationMode.FULL)
        body = _by_name(_kinds(decls, ArtifactKind.CLIENT_STREAM_METHOD), "CloseAndRecv").body_text()
        assert body.index("CloseSend") < body.index("RecvMsg")
