"""Registration builder.

``ServiceDescriptor`` is the static table handed to the runtime's service
registrar: unary methods go to ``Methods``, every streaming shape goes to
``Streams`` together with its two streaming flags, and ``Metadata`` names
the originating ``.proto`` file.  The registrar receives a nil
implementation pointer because each handler is already a method value bound
to the service struct.
"""

from __future__ import annotations

from dataclasses import dataclass

from grpcgen.emit import go_quote
from grpcgen.gen._common import GRPC_PACKAGE
from grpcgen.gen._nodes import ArtifactKind, Decl, Line
from grpcgen.model import ProtoFile, Service, Shape
from grpcgen.naming import adapter_name, register_func_name, service_type_name

__all__ = ["MethodEntry", "ServiceDescriptor", "StreamEntry", "build_registration", "service_descriptor"]


@dataclass(frozen=True)
class MethodEntry:
    """A unary method in the service descriptor."""

    method_name: str
    handler: str


@dataclass(frozen=True)
class StreamEntry:
    """A streaming method in the service descriptor."""

    stream_name: str
    handler: str
    server_streams: bool
    client_streams: bool


@dataclass(frozen=True)
class ServiceDescriptor:
    """Static descriptor registered for one service."""

    service_name: str
    methods: tuple[MethodEntry, ...]
    streams: tuple[StreamEntry, ...]
    metadata: str


def service_descriptor(file: ProtoFile, service: Service) -> ServiceDescriptor:
    """Split ``service``'s methods into unary and streaming entries, preserving order."""
    methods: list[MethodEntry] = []
    streams: list[StreamEntry] = []
    for method in service.methods:
        handler = adapter_name(method.go_name)
        if method.shape is Shape.UNARY:
            methods.append(MethodEntry(method.name, handler))
        else:
            streams.append(StreamEntry(method.name, handler, method.server_streaming, method.client_streaming))
    return ServiceDescriptor(service.full_name, tuple(methods), tuple(streams), file.path)


def _desc_list(field: str, type_name: str, populated: bool) -> list[Line]:
    # An empty list is closed on the same line.
    return [(f"{field}: []", GRPC_PACKAGE.ident(type_name), "{" if populated else "{},")]


def build_registration(file: ProtoFile, service: Service) -> Decl:
    """Build ``Register<Service>Service`` for ``service``."""
    sd = service_descriptor(file, service)
    name = register_func_name(service.go_name)

    body: list[Line] = [
        ("sd := ", GRPC_PACKAGE.ident("ServiceDesc"), "{"),
        ("ServiceName: ", go_quote(sd.service_name), ","),
    ]
    body += _desc_list("Methods", "MethodDesc", bool(sd.methods))
    for entry in sd.methods:
        body += [
            ("{",),
            ("MethodName: ", go_quote(entry.method_name), ","),
            ("Handler: srv.", entry.handler, ","),
            ("},",),
        ]
    if sd.methods:
        body.append(("},",))
    body += _desc_list("Streams", "StreamDesc", bool(sd.streams))
    for stream in sd.streams:
        body += [
            ("{",),
            ("StreamName: ", go_quote(stream.stream_name), ","),
            ("Handler: srv.", stream.handler, ","),
        ]
        if stream.server_streams:
            body.append(("ServerStreams: true,",))
        if stream.client_streams:
            body.append(("ClientStreams: true,",))
        body.append(("},",))
    if sd.streams:
        body.append(("},",))
    body += [
        ("Metadata: ", go_quote(sd.metadata), ","),
        ("}",),
        ("",),
        ("s.RegisterService(&sd, nil)",),
    ]

    return Decl(
        kind=ArtifactKind.REGISTRATION,
        name=name,
        header=(
            "func ",
            name,
            "(s ",
            GRPC_PACKAGE.ident("ServiceRegistrar"),
            ", srv *",
            service_type_name(service.go_name),
            ") {",
        ),
        doc=(f"{name} registers a service implementation with a gRPC server.",),
        deprecated=service.deprecated,
        body=tuple(body),
    )
