# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Resolved interface-description tree consumed by the builders.

The tree is built once per generation pass (see ``grpcgen.resolve``) and is
never mutated afterwards.  Services own their methods; the order of
``Service.methods`` is declaration order and is also the output order.

RPC Shapes (derived from the two streaming flags)
-------------------------------------------------
- **Unary**: single request, single response
- **ServerStreaming**: single request, stream of responses
- **ClientStreaming**: stream of requests, single response
- **BidiStreaming**: both sides stream
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from grpcgen.emit import GoIdent, GoImportPath, Location

__all__ = [
    "Method",
    "ProtoFile",
    "Service",
    "Shape",
    "classify",
]


class Shape(Enum):
    """Classification of RPC method patterns."""

    UNARY = "unary"
    SERVER_STREAMING = "server_streaming"
    CLIENT_STREAMING = "client_streaming"
    BIDI_STREAMING = "bidi_streaming"

    @property
    def client_streaming(self) -> bool:
        """Whether the client sends a stream of messages."""
        return self in (Shape.CLIENT_STREAMING, Shape.BIDI_STREAMING)

    @property
    def server_streaming(self) -> bool:
        """Whether the server sends a stream of messages."""
        return self in (Shape.SERVER_STREAMING, Shape.BIDI_STREAMING)

    @property
    def is_streaming(self) -> bool:
        """Whether either side streams."""
        return self is not Shape.UNARY


_SHAPES: dict[tuple[bool, bool], Shape] = {
    (False, False): Shape.UNARY,
    (False, True): Shape.SERVER_STREAMING,
    (True, False): Shape.CLIENT_STREAMING,
    (True, True): Shape.BIDI_STREAMING,
}


def classify(client_streaming: bool, server_streaming: bool) -> Shape:
    """Map a ``(client_streaming, server_streaming)`` flag pair to its shape."""
    return _SHAPES[(bool(client_streaming), bool(server_streaming))]


@dataclass(frozen=True, eq=False)
class Method:
    """A single RPC method.

    Attributes:
        name: Method name as declared in the ``.proto`` file.
        go_name: Exported Go name of the method.
        input: Go type of the request message.
        output: Go type of the response message.
        client_streaming: Whether the request side streams.
        server_streaming: Whether the response side streams.
        deprecated: ``option deprecated = true`` on the method.
        leading_comments: Comment text attached before the method, one
            line per ``\\n``, without comment markers.
        location: Source location used for documentation linking.
        parent: Owning service, bound when the service is constructed.

    """

    name: str
    go_name: str
    input: GoIdent
    output: GoIdent
    client_streaming: bool = False
    server_streaming: bool = False
    deprecated: bool = False
    leading_comments: str = ""
    location: Location | None = None
    parent: Service | None = field(default=None, repr=False, compare=False)

    @property
    def shape(self) -> Shape:
        """The method's RPC shape."""
        return classify(self.client_streaming, self.server_streaming)

    @property
    def service(self) -> Service:
        """The owning service; raises if the method was never attached to one."""
        if self.parent is None:
            raise RuntimeError(f"Method {self.name} is not attached to a service")
        return self.parent


@dataclass(frozen=True, eq=False)
class Service:
    """An RPC service and its methods, in declaration order."""

    name: str
    go_name: str
    full_name: str
    methods: tuple[Method, ...] = ()
    deprecated: bool = False
    leading_comments: str = ""
    location: Location | None = None

    def __post_init__(self) -> None:
        """Bind every method's back reference to this service."""
        object.__setattr__(self, "methods", tuple(self.methods))
        for method in self.methods:
            object.__setattr__(method, "parent", self)


@dataclass(frozen=True)
class ProtoFile:
    """One ``.proto`` file selected for generation.

    Attributes:
        path: Path of the file as given to ``protoc``; also the metadata tag
            recorded in each service descriptor.
        go_package_name: Package clause of the generated file.
        go_import_path: Import path of the generated package.
        generated_filename_prefix: Output path without extension.
        services: Services in declaration order.

    """

    path: str
    go_package_name: str
    go_import_path: GoImportPath
    generated_filename_prefix: str
    services: tuple[Service, ...] = ()
