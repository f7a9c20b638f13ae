"""Single formatting stage: turns ``Decl`` nodes into lines on a ``GeneratedFile``."""

from __future__ import annotations

from grpcgen.emit import GeneratedFile
from grpcgen.gen._common import DEPRECATION_COMMENT, comment_lines
from grpcgen.gen._nodes import Decl

__all__ = ["render_decl"]


def render_decl(g: GeneratedFile, decl: Decl) -> None:
    """Emit ``decl`` followed by a blank line."""
    for line in decl.doc:
        g.p("// " + line if line else "//")
    if decl.deprecated:
        if decl.doc:
            g.p("//")
        g.p(DEPRECATION_COMMENT)
    if decl.annotation is not None:
        g.annotate(decl.annotation, decl.location)
    g.p(*decl.header)
    for member in decl.members:
        if member.deprecated:
            g.p(DEPRECATION_COMMENT)
        for line in comment_lines(member.comments):
            g.p(line)
        if member.annotation is not None:
            g.annotate(member.annotation, member.location)
        g.p(*member.signature)
    for body_line in decl.body:
        g.p(*body_line)
    g.p("}")
    g.p()
