"""Structured artifact nodes produced by the builders.

Builders never write text directly.  Each returns ``Decl`` nodes (one per
top-level Go declaration) whose headers, members and bodies are sequences of
``Fragment`` values; ``render_decl`` in ``_render.py`` is the single stage
that turns nodes into lines on a ``GeneratedFile``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias

from grpcgen.emit import Fragment, Location

Line: TypeAlias = "tuple[Fragment, ...]"


class ArtifactKind(Enum):
    """Kind of a top-level generated declaration."""

    CLIENT_INTERFACE = "client-interface"
    CLIENT_STRUCT = "client-struct"
    CLIENT_CONSTRUCTOR = "client-constructor"
    CLIENT_STREAM_DESC = "client-stream-desc"
    CLIENT_METHOD = "client-impl-method"
    CLIENT_STREAM_INTERFACE = "client-stream-type"
    CLIENT_STREAM_STRUCT = "client-stream-struct"
    CLIENT_STREAM_METHOD = "client-stream-method"
    SERVICE_STRUCT = "server-struct"
    SERVER_ADAPTER = "server-adapter-function"
    SERVER_STREAM_INTERFACE = "server-stream-type"
    SERVER_STREAM_STRUCT = "server-stream-struct"
    SERVER_STREAM_METHOD = "server-stream-method"
    UNSTABLE_INTERFACE = "unstable-interface"
    REGISTRATION = "registration-function"
    SERVICE_CONSTRUCTOR = "service-constructor"


def plain(line: Line) -> str:
    """Join a line's fragments without package qualification."""
    return "".join(str(part) for part in line)


@dataclass(frozen=True)
class Member:
    """One entry inside an interface or struct declaration.

    Attributes:
        name: Method, field or embedded type name.
        signature: The full entry text.
        method: Go name of the RPC method this entry belongs to, if any.
        comments: Leading comment text copied from the ``.proto`` file.
        deprecated: Emit a deprecation notice before the entry.
        annotation: Symbol registered for documentation linking.
        location: Source location for ``annotation``.

    """

    name: str
    signature: Line
    method: str | None = None
    comments: str = ""
    deprecated: bool = False
    annotation: str | None = None
    location: Location | None = None


@dataclass(frozen=True)
class Decl:
    """A top-level Go declaration.

    ``header`` is the opening line up to and including ``{``; the renderer
    emits members, then body lines, then the closing ``}``.
    """

    kind: ArtifactKind
    name: str
    header: Line
    doc: tuple[str, ...] = ()
    deprecated: bool = False
    members: tuple[Member, ...] = ()
    body: tuple[Line, ...] = ()
    method: str | None = None
    annotation: str | None = None
    location: Location | None = None

    @property
    def member_names(self) -> list[str]:
        """Names of all members, in order."""
        return [m.name for m in self.members]

    def member(self, name: str) -> Member:
        """Return the member called ``name``."""
        for m in self.members:
            if m.name == name:
                return m
        raise KeyError(name)

    def body_text(self) -> str:
        """Unqualified body text, one statement per line."""
        return "\n".join(plain(line) for line in self.body)
