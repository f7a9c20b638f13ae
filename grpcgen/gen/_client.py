# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Client stub builder.

Per service this emits the exported client interface, the unexported
implementation struct wrapping a ``grpc.ClientConnInterface``, the
``New<Service>Client`` constructor, and one implementation per method.
Streaming methods additionally get a static ``grpc.StreamDesc`` and a
shape-specific stream wrapper:

==================  ======  ======  ==============
Shape               Send    Recv    CloseAndRecv
==================  ======  ======  ==============
ServerStreaming             yes
ClientStreaming     yes             yes
BidiStreaming       yes     yes
==================  ======  ======  ==============

Nothing is emitted in migration-lite mode.
"""

from __future__ import annotations

from grpcgen.emit import go_quote
from grpcgen.gen._common import GRPC_PACKAGE, client_signature
from grpcgen.gen._nodes import ArtifactKind, Decl, Line, Member
from grpcgen.model import Method, Service, Shape
from grpcgen.naming import (
    client_impl_name,
    client_name,
    client_stream_impl_name,
    client_stream_interface_name,
    full_method_name,
    new_client_func_name,
    stream_desc_name,
)
from grpcgen.options import GenerationMode

__all__ = ["build_client"]

_CLIENT_STREAM = GRPC_PACKAGE.ident("ClientStream")
_CLIENT_CONN = GRPC_PACKAGE.ident("ClientConnInterface")


def build_client(service: Service, mode: GenerationMode) -> list[Decl]:
    """Build every client-side declaration for ``service``.

    Args:
        service: The service to generate a client for.
        mode: Generation mode; migration-lite yields no declarations.

    Returns:
        Declarations in output order.

    """
    if not mode.emits_client:
        return []
    decls = [_client_interface(service), _client_struct(service), _client_constructor(service)]
    for method in service.methods:
        decls.extend(_client_method(method))
    return decls


def _client_interface(service: Service) -> Decl:
    name = client_name(service.go_name)
    members = tuple(
        Member(
            name=method.go_name,
            signature=client_signature(method),
            method=method.go_name,
            comments=method.leading_comments,
            deprecated=method.deprecated,
            annotation=f"{name}.{method.go_name}",
            location=method.location,
        )
        for method in service.methods
    )
    return Decl(
        kind=ArtifactKind.CLIENT_INTERFACE,
        name=name,
        header=("type ", name, " interface {"),
        doc=(
            f"{name} is the client API for {service.go_name} service.",
            "",
            "For semantics around ctx use and closing/ending streaming RPCs, please refer to "
            "https://pkg.go.dev/google.golang.org/grpc/?tab=doc#ClientConn.NewStream.",
        ),
        deprecated=service.deprecated,
        members=members,
        annotation=name,
        location=service.location,
    )


def _client_struct(service: Service) -> Decl:
    name = client_impl_name(service.go_name)
    return Decl(
        kind=ArtifactKind.CLIENT_STRUCT,
        name=name,
        header=("type ", name, " struct {"),
        members=(Member(name="cc", signature=("cc ", _CLIENT_CONN)),),
    )


def _client_constructor(service: Service) -> Decl:
    name = new_client_func_name(service.go_name)
    return Decl(
        kind=ArtifactKind.CLIENT_CONSTRUCTOR,
        name=name,
        header=("func ", name, "(cc ", _CLIENT_CONN, ") ", client_name(service.go_name), " {"),
        deprecated=service.deprecated,
        body=(("return &", client_impl_name(service.go_name), "{cc}"),),
    )


def _client_method(method: Method) -> list[Decl]:
    service = method.service
    path = go_quote(full_method_name(service.full_name, method.name))
    receiver = ("func (c *", client_impl_name(service.go_name), ") ", *client_signature(method), " {")

    if method.shape is Shape.UNARY:
        return [
            Decl(
                kind=ArtifactKind.CLIENT_METHOD,
                name=method.go_name,
                header=receiver,
                deprecated=method.deprecated,
                method=method.go_name,
                body=(
                    ("out := new(", method.output, ")"),
                    ("err := c.cc.Invoke(ctx, ", path, ", in, out, opts...)"),
                    ("if err != nil {",),
                    ("return nil, err",),
                    ("}",),
                    ("return out, nil",),
                ),
            )
        ]

    desc_name = stream_desc_name(service.go_name, method.go_name)
    impl_name = client_stream_impl_name(service.go_name, method.go_name)
    body = [
        ("stream, err := c.cc.NewStream(ctx, ", desc_name, ", ", path, ", opts...)"),
        ("if err != nil {",),
        ("return nil, err",),
        ("}",),
        ("x := &", impl_name, "{stream}"),
    ]
    if not method.client_streaming:
        body += [
            ("if err := x.ClientStream.SendMsg(in); err != nil {",),
            ("return nil, err",),
            ("}",),
            ("if err := x.ClientStream.CloseSend(); err != nil {",),
            ("return nil, err",),
            ("}",),
        ]
    body.append(("return x, nil",))

    decls = [
        _stream_desc(method),
        Decl(
            kind=ArtifactKind.CLIENT_METHOD,
            name=method.go_name,
            header=receiver,
            deprecated=method.deprecated,
            method=method.go_name,
            body=tuple(body),
        ),
    ]
    decls.extend(_client_stream_types(method))
    return decls


def _stream_desc(method: Method) -> Decl:
    name = stream_desc_name(method.service.go_name, method.go_name)
    body = [("StreamName: ", go_quote(method.name), ",")]
    if method.server_streaming:
        body.append(("ServerStreams: true,",))
    if method.client_streaming:
        body.append(("ClientStreams: true,",))
    return Decl(
        kind=ArtifactKind.CLIENT_STREAM_DESC,
        name=name,
        header=("var ", name, " = &", GRPC_PACKAGE.ident("StreamDesc"), "{"),
        method=method.go_name,
        body=tuple(body),
    )


def _client_stream_types(method: Method) -> list[Decl]:
    service = method.service
    iface_name = client_stream_interface_name(service.go_name, method.go_name)
    impl_name = client_stream_impl_name(service.go_name, method.go_name)
    gen_send = method.client_streaming
    gen_recv = method.server_streaming
    gen_close_and_recv = not method.server_streaming

    members: list[Member] = []
    if gen_send:
        members.append(Member("Send", ("Send(*", method.input, ") error"), method=method.go_name))
    if gen_recv:
        members.append(Member("Recv", ("Recv() (*", method.output, ", error)"), method=method.go_name))
    if gen_close_and_recv:
        members.append(Member("CloseAndRecv", ("CloseAndRecv() (*", method.output, ", error)"), method=method.go_name))
    members.append(Member("ClientStream", (_CLIENT_STREAM,)))

    decls = [
        Decl(
            kind=ArtifactKind.CLIENT_STREAM_INTERFACE,
            name=iface_name,
            header=("type ", iface_name, " interface {"),
            members=tuple(members),
            method=method.go_name,
        ),
        Decl(
            kind=ArtifactKind.CLIENT_STREAM_STRUCT,
            name=impl_name,
            header=("type ", impl_name, " struct {"),
            members=(Member("ClientStream", (_CLIENT_STREAM,)),),
            method=method.go_name,
        ),
    ]

    def stream_method(name: str, signature: Line, body: tuple[Line, ...]) -> Decl:
        return Decl(
            kind=ArtifactKind.CLIENT_STREAM_METHOD,
            name=name,
            header=("func (x *", impl_name, ") ", *signature, " {"),
            method=method.go_name,
            body=body,
        )

    receive = (
        ("m := new(", method.output, ")"),
        ("if err := x.ClientStream.RecvMsg(m); err != nil {",),
        ("return nil, err",),
        ("}",),
        ("return m, nil",),
    )
    if gen_send:
        decls.append(stream_method("Send", ("Send(m *", method.input, ") error"), (("return x.ClientStream.SendMsg(m)",),)))
    if gen_recv:
        decls.append(stream_method("Recv", ("Recv() (*", method.output, ", error)"), receive))
    if gen_close_and_recv:
        close_send = (
            ("if err := x.ClientStream.CloseSend(); err != nil {",),
            ("return nil, err",),
            ("}",),
        )
        decls.append(stream_method("CloseAndRecv", ("CloseAndRecv() (*", method.output, ", error)"), close_send + receive))
    return decls
