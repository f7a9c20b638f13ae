# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""End-to-end tests for per-file generation and the mode selector."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Callable
from pathlib import Path

import pytest

from grpcgen.emit import GoImportPath
from grpcgen.gen import (
    Artifact,
    ArtifactKind,
    artifact_set,
    build_service_artifacts,
    generate_file,
    output_filename,
)
from grpcgen.model import Method, ProtoFile
from grpcgen.options import GenerationMode

MethodFactory = Callable[..., Method]
FileFactory = Callable[..., ProtoFile]

TESTDATA = Path(__file__).parent / "testdata"

_CLIENT_KINDS = {
    ArtifactKind.CLIENT_INTERFACE,
    ArtifactKind.CLIENT_STRUCT,
    ArtifactKind.CLIENT_CONSTRUCTOR,
    ArtifactKind.CLIENT_STREAM_DESC,
    ArtifactKind.CLIENT_METHOD,
    ArtifactKind.CLIENT_STREAM_INTERFACE,
    ArtifactKind.CLIENT_STREAM_STRUCT,
    ArtifactKind.CLIENT_STREAM_METHOD,
}
_SERVER_STREAM_KINDS = {
    ArtifactKind.SERVER_STREAM_INTERFACE,
    ArtifactKind.SERVER_STREAM_STRUCT,
    ArtifactKind.SERVER_STREAM_METHOD,
}


def _content(file: ProtoFile, mode: GenerationMode = GenerationMode.FULL) -> str:
    g = generate_file(file, mode)
    assert g is not None
    return g.content()


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    """Whole-file output for representative services."""

    def test_unary_golden(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """A single unary method produces the expected file byte for byte."""
        file = make_file(make_method("SayHello", comments=" Sends a greeting\n"))
        expected = (TESTDATA / "greeter_unary_grpc.pb.go").read_text()
        assert _content(file) == expected

    def test_bidi(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """Bidi methods get both stream types and a stream registration entry."""
        file = make_file(
            make_method("Chat", client_streaming=True, server_streaming=True, input_name="ChatMessage", output_name="ChatMessage")
        )
        content = _content(file)
        assert "type Greeter_ChatClient interface {\n\tSend(*ChatMessage) error\n\tRecv() (*ChatMessage, error)\n" in content
        assert "type Greeter_ChatServer interface {\n\tSend(*ChatMessage) error\n\tRecv() (*ChatMessage, error)\n" in content
        assert '\t\t\t\tStreamName: "Chat",\n' in content
        assert "\t\t\t\tServerStreams: true,\n\t\t\t\tClientStreams: true,\n" in content
        assert "Methods: []grpc.MethodDesc{},\n" in content

    def test_client_streaming(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """Client streaming uses CloseAndRecv on the client and SendAndClose on the server."""
        file = make_file(
            make_method("Upload", client_streaming=True, input_name="Chunk", output_name="UploadSummary")
        )
        content = _content(file)
        assert "func (x *greeterUploadClient) CloseAndRecv() (*UploadSummary, error) {" in content
        assert "func (x *greeterUploadServer) SendAndClose(m *UploadSummary) error {" in content
        assert "func (x *greeterUploadServer) Recv() (*Chunk, error) {" in content
        assert "Upload(Greeter_UploadServer) error" in content

    def test_deprecated_method(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """A deprecated method is marked wherever it is declared as a member."""
        file = make_file(make_method("SayGoodbye", deprecated=True))
        content = _content(file)
        assert content.count("\t// Deprecated: Do not use.\n\tSayGoodbye") == 3

    def test_deprecated_service(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """A deprecated service marks its top-level declarations."""
        file = make_file(make_method("A"), deprecated=True)
        content = _content(file)
        assert "//\n// Deprecated: Do not use.\ntype GreeterClient interface {" in content
        assert "// Deprecated: Do not use.\nfunc NewGreeterClient(" in content
        assert "//\n// Deprecated: Do not use.\nfunc RegisterGreeterService(" in content

    def test_foreign_message_types_qualified(self, make_file: FileFactory) -> None:
        """Messages from other Go packages are qualified and imported."""
        empty = GoImportPath("example.com/common").ident("Empty")
        reply = GoImportPath("example.com/helloworld").ident("HelloReply")
        method = Method(
            name="Ping",
            go_name="Ping",
            input=empty,
            output=reply,
            client_streaming=False,
            server_streaming=False,
        )
        content = _content(make_file(method))
        assert '\t"example.com/common"\n' in content
        assert "Ping(context.Context, *common.Empty) (*HelloReply, error)" in content

    def test_no_services_no_file(self, make_file: FileFactory) -> None:
        """Files without services produce nothing."""
        file = dataclasses.replace(make_file(), services=())
        assert generate_file(file, GenerationMode.FULL) is None

    def test_output_filename(self, greeter_file: ProtoFile) -> None:
        """Output is named after the file prefix."""
        assert output_filename(greeter_file) == "helloworld_grpc.pb.go"


# ---------------------------------------------------------------------------
# Mode selector
# ---------------------------------------------------------------------------


class TestModeSelector:
    """Tests for full versus migration-lite generation."""

    def test_migration_keeps_server_side_identical(self, greeter_file: ProtoFile) -> None:
        """Shared declarations are identical in both modes."""
        service = greeter_file.services[0]
        full = build_service_artifacts(greeter_file, service, GenerationMode.FULL)
        lite = build_service_artifacts(greeter_file, service, GenerationMode.MIGRATION_LITE)
        assert lite == [d for d in full if d.kind not in _CLIENT_KINDS | _SERVER_STREAM_KINDS]

    def test_migration_mode_output(self, greeter_file: ProtoFile) -> None:
        """Migration-lite output has no client or stream types but keeps the rest."""
        content = _content(greeter_file, GenerationMode.MIGRATION_LITE)
        assert "GreeterClient" not in content
        assert "type Greeter_ChatServer" not in content
        assert "type UnstableGreeterService interface {" in content
        assert "func RegisterGreeterService(" in content
        assert "func NewGreeterService(" in content

    @pytest.mark.parametrize("mode", list(GenerationMode))
    def test_idempotent(self, greeter_file: ProtoFile, mode: GenerationMode) -> None:
        """Generating twice yields byte-identical output."""
        assert _content(greeter_file, mode) == _content(greeter_file, mode)

    def test_declaration_order(self, greeter_file: ProtoFile) -> None:
        """Builders run client, dispatch, unstable, registration, constructor."""
        content = _content(greeter_file)
        positions = [
            content.index("type GreeterClient interface"),
            content.index("type GreeterService struct"),
            content.index("type UnstableGreeterService interface"),
            content.index("func RegisterGreeterService("),
            content.index("func NewGreeterService("),
        ]
        assert positions == sorted(positions)


class TestArtifactSet:
    """Tests for the per-method artifact set."""

    _SHARED = {
        Artifact.SERVER_HANDLER_FIELD,
        Artifact.SERVER_ADAPTER_FUNCTION,
        Artifact.UNSTABLE_INTERFACE_METHOD,
        Artifact.REGISTRATION_ENTRY,
    }

    @pytest.mark.parametrize(
        ("client_streaming", "server_streaming", "full_extra"),
        [
            (False, False, {Artifact.CLIENT_INTERFACE_METHOD, Artifact.CLIENT_IMPL_METHOD}),
            (
                False,
                True,
                {
                    Artifact.CLIENT_INTERFACE_METHOD,
                    Artifact.CLIENT_IMPL_METHOD,
                    Artifact.CLIENT_STREAM_TYPE,
                    Artifact.SERVER_STREAM_TYPE,
                },
            ),
            (
                True,
                False,
                {
                    Artifact.CLIENT_INTERFACE_METHOD,
                    Artifact.CLIENT_IMPL_METHOD,
                    Artifact.CLIENT_STREAM_TYPE,
                    Artifact.SERVER_STREAM_TYPE,
                },
            ),
            (
                True,
                True,
                {
                    Artifact.CLIENT_INTERFACE_METHOD,
                    Artifact.CLIENT_IMPL_METHOD,
                    Artifact.CLIENT_STREAM_TYPE,
                    Artifact.SERVER_STREAM_TYPE,
                },
            ),
        ],
        ids=["unary", "server_streaming", "client_streaming", "bidi"],
    )
    def test_by_shape_and_mode(
        self,
        make_method: MethodFactory,
        make_file: FileFactory,
        client_streaming: bool,
        server_streaming: bool,
        full_extra: set[Artifact],
    ) -> None:
        """The artifact set depends only on shape and mode."""
        file = make_file(make_method("M", client_streaming=client_streaming, server_streaming=server_streaming))
        method = file.services[0].methods[0]
        assert artifact_set(file, method, GenerationMode.FULL) == self._SHARED | full_extra
        assert artifact_set(file, method, GenerationMode.MIGRATION_LITE) == self._SHARED

    def test_deterministic_across_services(self, make_method: MethodFactory, make_file: FileFactory) -> None:
        """Two methods of the same shape get the same set regardless of neighbours."""
        a = make_file(make_method("A", server_streaming=True))
        b = make_file(make_method("X"), make_method("B", server_streaming=True), service="Other")
        set_a = artifact_set(a, a.services[0].methods[0], GenerationMode.FULL)
        set_b = artifact_set(b, b.services[0].methods[1], GenerationMode.FULL)
        assert set_a == set_b


class TestGenerateLogging:
    """Tests for generation log records."""

    def test_info_record_names_proto_file(self, greeter_file: ProtoFile, caplog: pytest.LogCaptureFixture) -> None:
        """A generated file is logged at INFO with the source file attached."""
        with caplog.at_level(logging.INFO, logger="grpcgen.gen"):
            generate_file(greeter_file, GenerationMode.MIGRATION_LITE)
        records = [r for r in caplog.records if r.name == "grpcgen.gen"]
        assert len(records) == 1
        assert records[0].getMessage() == "Generated helloworld_grpc.pb.go: services=1, mode=migration_lite"
        assert records[0].proto_file == "helloworld.proto"  # type: ignore[attr-defined]
