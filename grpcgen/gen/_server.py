# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Server dispatch builder.

The server side is a struct of function-typed fields, one per method.  Each
field is bridged to the runtime's generic dispatch entry point by an
unexported adapter method:

- **Unary** adapters take ``(srv, ctx, dec, interceptor)``: decode the
  request, then either call the field directly or hand a closure to the
  interceptor.
- **Server-streaming** adapters receive the single request from the stream
  before calling the field.
- **Client- and bidi-streaming** adapters pass the wrapped stream straight
  to the field.

Every adapter first checks its field and returns ``codes.Unimplemented``
naming the method when it is nil, so fields can be assigned any time before
the first call.

``build_service_constructor`` emits ``New<Service>Service(s interface{})``,
which fills in a field only when ``s`` satisfies a single-method interface
with exactly that method's signature.
"""

from __future__ import annotations

from grpcgen.emit import go_quote
from grpcgen.gen._common import (
    CODES_PACKAGE,
    CONTEXT,
    GRPC_PACKAGE,
    STATUS_PACKAGE,
    handler_signature,
    method_signature,
)
from grpcgen.gen._nodes import ArtifactKind, Decl, Line, Member
from grpcgen.model import Method, Service, Shape
from grpcgen.naming import (
    adapter_name,
    full_method_name,
    new_service_func_name,
    register_func_name,
    server_stream_impl_name,
    server_stream_interface_name,
    service_type_name,
)
from grpcgen.options import GenerationMode

__all__ = ["build_dispatch", "build_service_constructor"]

_SERVER_STREAM = GRPC_PACKAGE.ident("ServerStream")


def build_dispatch(service: Service, mode: GenerationMode) -> list[Decl]:
    """Build the handler struct, adapters and server stream types for ``service``.

    Args:
        service: The service to generate dispatch code for.
        mode: Generation mode; migration-lite omits the stream types only.

    Returns:
        Declarations in output order.

    """
    decls = [_service_struct(service)]
    decls.extend(_method_adapter(method) for method in service.methods)
    for method in service.methods:
        decls.extend(_server_stream_types(method, mode))
    return decls


def _service_struct(service: Service) -> Decl:
    name = service_type_name(service.go_name)
    members = tuple(
        Member(
            name=method.go_name,
            signature=handler_signature(method),
            method=method.go_name,
            comments=method.leading_comments,
            deprecated=method.deprecated,
            annotation=f"{name}.{method.go_name}",
            location=method.location,
        )
        for method in service.methods
    )
    return Decl(
        kind=ArtifactKind.SERVICE_STRUCT,
        name=name,
        header=("type ", name, " struct {"),
        doc=(
            f"{name} is the service API for {service.go_name} service.",
            "Fields should be assigned to their respective handler implementations only before",
            f"{register_func_name(service.go_name)} is called.  Any unassigned fields will result in the",
            "handler for that method returning an Unimplemented error.",
        ),
        deprecated=service.deprecated,
        members=members,
        annotation=name,
        location=service.location,
    )


def _method_adapter(method: Method) -> Decl:
    service = method.service
    receiver: Line = ("func (s *", service_type_name(service.go_name), ") ", adapter_name(method.go_name))
    unimplemented = (
        STATUS_PACKAGE.ident("Errorf"),
        "(",
        CODES_PACKAGE.ident("Unimplemented"),
        ", ",
        go_quote(f"method {method.go_name} not implemented"),
        ")",
    )

    if method.shape is Shape.UNARY:
        header: Line = (
            *receiver,
            "(_ interface{}, ctx ",
            CONTEXT,
            ", dec func(interface{}) error, interceptor ",
            GRPC_PACKAGE.ident("UnaryServerInterceptor"),
            ") (interface{}, error) {",
        )
        body: list[Line] = [
            ("if s.", method.go_name, " == nil {"),
            ("return nil, ", *unimplemented),
            ("}",),
            *_unary_body(method),
        ]
    else:
        header = (*receiver, "(_ interface{}, stream ", _SERVER_STREAM, ") error {")
        body = [
            ("if s.", method.go_name, " == nil {"),
            ("return ", *unimplemented),
            ("}",),
            *_stream_body(method),
        ]

    return Decl(
        kind=ArtifactKind.SERVER_ADAPTER,
        name=adapter_name(method.go_name),
        header=header,
        method=method.go_name,
        body=tuple(body),
    )


def _unary_body(method: Method) -> list[Line]:
    service = method.service
    return [
        ("in := new(", method.input, ")"),
        ("if err := dec(in); err != nil {",),
        ("return nil, err",),
        ("}",),
        ("if interceptor == nil {",),
        ("return s.", method.go_name, "(ctx, in)"),
        ("}",),
        ("info := &", GRPC_PACKAGE.ident("UnaryServerInfo"), "{"),
        ("Server: s,",),
        ("FullMethod: ", go_quote(full_method_name(service.full_name, method.name)), ","),
        ("}",),
        ("handler := func(ctx ", CONTEXT, ", req interface{}) (interface{}, error) {"),
        ("return s.", method.go_name, "(ctx, req.(*", method.input, "))"),
        ("}",),
        ("return interceptor(ctx, in, info, handler)",),
    ]


def _stream_body(method: Method) -> list[Line]:
    stream_type = server_stream_impl_name(method.service.go_name, method.go_name)
    if not method.client_streaming:
        return [
            ("m := new(", method.input, ")"),
            ("if err := stream.RecvMsg(m); err != nil {",),
            ("return err",),
            ("}",),
            ("return s.", method.go_name, "(m, &", stream_type, "{stream})"),
        ]
    return [("return s.", method.go_name, "(&", stream_type, "{stream})")]


def _server_stream_types(method: Method, mode: GenerationMode) -> list[Decl]:
    if not mode.emits_stream_types or method.shape is Shape.UNARY:
        return []
    service = method.service
    iface_name = server_stream_interface_name(service.go_name, method.go_name)
    impl_name = server_stream_impl_name(service.go_name, method.go_name)
    gen_send = method.server_streaming
    gen_send_and_close = not method.server_streaming
    gen_recv = method.client_streaming

    members: list[Member] = []
    if gen_send:
        members.append(Member("Send", ("Send(*", method.output, ") error"), method=method.go_name))
    if gen_send_and_close:
        members.append(Member("SendAndClose", ("SendAndClose(*", method.output, ") error"), method=method.go_name))
    if gen_recv:
        members.append(Member("Recv", ("Recv() (*", method.input, ", error)"), method=method.go_name))
    members.append(Member("ServerStream", (_SERVER_STREAM,)))

    decls = [
        Decl(
            kind=ArtifactKind.SERVER_STREAM_INTERFACE,
            name=iface_name,
            header=("type ", iface_name, " interface {"),
            members=tuple(members),
            method=method.go_name,
        ),
        Decl(
            kind=ArtifactKind.SERVER_STREAM_STRUCT,
            name=impl_name,
            header=("type ", impl_name, " struct {"),
            members=(Member("ServerStream", (_SERVER_STREAM,)),),
            method=method.go_name,
        ),
    ]

    def stream_method(name: str, signature: Line, body: tuple[Line, ...]) -> Decl:
        return Decl(
            kind=ArtifactKind.SERVER_STREAM_METHOD,
            name=name,
            header=("func (x *", impl_name, ") ", *signature, " {"),
            method=method.go_name,
            body=body,
        )

    send = (("return x.ServerStream.SendMsg(m)",),)
    if gen_send:
        decls.append(stream_method("Send", ("Send(m *", method.output, ") error"), send))
    if gen_send_and_close:
        decls.append(stream_method("SendAndClose", ("SendAndClose(m *", method.output, ") error"), send))
    if gen_recv:
        receive = (
            ("m := new(", method.input, ")"),
            ("if err := x.ServerStream.RecvMsg(m); err != nil {",),
            ("return nil, err",),
            ("}",),
            ("return m, nil",),
        )
        decls.append(stream_method("Recv", ("Recv() (*", method.input, ", error)"), receive))
    return decls


def build_service_constructor(service: Service) -> Decl:
    """Build ``New<Service>Service``, the capability-checked struct constructor."""
    name = new_service_func_name(service.go_name)
    struct_name = service_type_name(service.go_name)
    body: list[Line] = [("ns := &", struct_name, "{}")]
    for method in service.methods:
        body += [
            ("if h, ok := s.(interface {",),
            method_signature(method),
            ("}); ok {",),
            ("ns.", method.go_name, " = h.", method.go_name),
            ("}",),
        ]
    body.append(("return ns",))
    return Decl(
        kind=ArtifactKind.SERVICE_CONSTRUCTOR,
        name=name,
        header=("func ", name, "(s interface{}) *", struct_name, " {"),
        doc=(
            f"{name} creates a new {struct_name} containing the",
            f"implemented methods of the {service.go_name} service in s.  Any unimplemented",
            "methods will result in the gRPC server returning an UNIMPLEMENTED status to the client.",
            "This includes situations where the method handler is misspelled or has the wrong",
            "signature.  For this reason, this function should be used with great care and",
            "is not recommended to be used by most users.",
        ),
        body=tuple(body),
    )
