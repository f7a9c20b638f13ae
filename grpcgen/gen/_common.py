"""Package constants and signature families shared by the builders."""

from __future__ import annotations

from grpcgen.emit import Fragment, GoImportPath
from grpcgen.gen._nodes import Line
from grpcgen.model import Method, Shape
from grpcgen.naming import client_stream_interface_name, server_stream_interface_name

CONTEXT_PACKAGE = GoImportPath("context")
GRPC_PACKAGE = GoImportPath("google.golang.org/grpc")
CODES_PACKAGE = GoImportPath("google.golang.org/grpc/codes")
STATUS_PACKAGE = GoImportPath("google.golang.org/grpc/status")

CONTEXT = CONTEXT_PACKAGE.ident("Context")

DEPRECATION_COMMENT = "// Deprecated: Do not use."


def join(parts: list[Line], sep: str = ", ") -> Line:
    """Join several fragment sequences with ``sep``."""
    out: list[Fragment] = []
    for i, part in enumerate(parts):
        if i:
            out.append(sep)
        out.extend(part)
    return tuple(out)


def client_signature(method: Method) -> Line:
    """Client interface entry, e.g. ``SayHello(ctx, in *Req, opts ...) (*Resp, error)``."""
    parts: list[Fragment] = [method.go_name, "(ctx ", CONTEXT]
    if not method.client_streaming:
        parts += [", in *", method.input]
    parts += [", opts ...", GRPC_PACKAGE.ident("CallOption"), ") ("]
    if method.shape is Shape.UNARY:
        parts += ["*", method.output]
    else:
        parts.append(client_stream_interface_name(method.service.go_name, method.go_name))
    parts.append(", error)")
    return tuple(parts)


def _handler_params(method: Method) -> tuple[Line, Line]:
    args: list[Line] = []
    ret: Line = ("error",)
    if method.shape is Shape.UNARY:
        args.append((CONTEXT,))
        ret = ("(*", method.output, ", error)")
    if not method.client_streaming:
        args.append(("*", method.input))
    if method.shape.is_streaming:
        args.append((server_stream_interface_name(method.service.go_name, method.go_name),))
    return join(args), ret


def method_signature(method: Method) -> Line:
    """Interface method form, e.g. ``SayHello(context.Context, *Req) (*Resp, error)``."""
    args, ret = _handler_params(method)
    return (method.go_name, "(", *args, ") ", *ret)


def handler_signature(method: Method) -> Line:
    """Struct field form, e.g. ``SayHello func(context.Context, *Req) (*Resp, error)``."""
    args, ret = _handler_params(method)
    return (method.go_name, " func(", *args, ") ", *ret)


def comment_lines(text: str) -> list[str]:
    """Turn leading comment text into ``//`` lines."""
    if not text:
        return []
    return ["//" + line for line in text.removesuffix("\n").split("\n")]
