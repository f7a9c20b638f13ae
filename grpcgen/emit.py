# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Text sink for generated Go source.

``GeneratedFile`` collects lines through ``p()``, qualifies Go identifiers
against the file's own import path (recording an import for every foreign
package it sees), and records annotated symbols so documentation tooling can
link generated declarations back to the ``.proto`` source.

``content()`` assembles the final text:

1. every line emitted before the package clause (header comments),
2. the package clause,
3. a sorted ``import`` block,
4. the remaining lines, indented with one tab per open brace.

Consecutive blank lines collapse to one and the file ends with a single
newline, so output is byte-identical for identical input.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TypeAlias

from google.protobuf import descriptor_pb2, text_format

__all__ = [
    "Annotation",
    "Fragment",
    "GeneratedFile",
    "GoIdent",
    "GoImportPath",
    "Location",
    "clean_package_name",
    "go_quote",
]


@dataclass(frozen=True)
class GoImportPath:
    """A Go package import path such as ``google.golang.org/grpc``.

    ``name`` is the declared package name when it is known to differ from
    the last path element; it is not part of equality.
    """

    path: str
    name: str = field(default="", compare=False)

    def ident(self, name: str) -> GoIdent:
        """Return the identifier ``name`` declared in this package."""
        return GoIdent(name, self)

    def __str__(self) -> str:
        """Return the raw import path."""
        return self.path


@dataclass(frozen=True)
class GoIdent:
    """A Go identifier together with the package that declares it."""

    name: str
    import_path: GoImportPath

    def __str__(self) -> str:
        """Return the unqualified name."""
        return self.name


@dataclass(frozen=True)
class Location:
    """Position of a declaration in the source ``.proto`` file.

    Attributes:
        source_file: Path of the ``.proto`` file, as given to ``protoc``.
        path: ``SourceCodeInfo`` path of the declaration.

    """

    source_file: str
    path: tuple[int, ...]


@dataclass(frozen=True)
class Annotation:
    """A generated symbol mapped back to its source location."""

    symbol: str
    location: Location
    begin: int
    end: int


Fragment: TypeAlias = "str | GoIdent"

# ---------------------------------------------------------------------------
# Quoting and package names
# ---------------------------------------------------------------------------

_GO_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    "\\": "\\\\",
    '"': '\\"',
}

_GO_KEYWORDS = frozenset(
    {
        "break",
        "case",
        "chan",
        "const",
        "continue",
        "default",
        "defer",
        "else",
        "fallthrough",
        "for",
        "func",
        "go",
        "goto",
        "if",
        "import",
        "interface",
        "map",
        "package",
        "range",
        "return",
        "select",
        "struct",
        "switch",
        "type",
        "var",
    }
)


def go_quote(s: str) -> str:
    """Quote ``s`` as a Go interpreted string literal.

    Printable characters are kept as-is; control characters use ``\\x``,
    ``\\u`` or ``\\U`` escapes the same way Go's ``strconv.Quote`` does.
    """
    out = ['"']
    for ch in s:
        escaped = _GO_ESCAPES.get(ch)
        if escaped is not None:
            out.append(escaped)
        elif ch.isprintable():
            out.append(ch)
        elif ord(ch) < 0x80:
            out.append(f"\\x{ord(ch):02x}")
        elif ord(ch) < 0x10000:
            out.append(f"\\u{ord(ch):04x}")
        else:
            out.append(f"\\U{ord(ch):08x}")
    out.append('"')
    return "".join(out)


def clean_package_name(name: str) -> str:
    """Sanitize ``name`` into a valid Go package identifier."""
    cleaned = "".join(c if c.isalnum() or c == "_" else "_" for c in name)
    if not cleaned or not (cleaned[0].isalpha() or cleaned[0] == "_"):
        cleaned = "_" + cleaned
    if cleaned in _GO_KEYWORDS:
        cleaned = "_" + cleaned
    return cleaned


# ---------------------------------------------------------------------------
# GeneratedFile
# ---------------------------------------------------------------------------


class GeneratedFile:
    """Accumulates the lines of one generated Go file."""

    def __init__(self, filename: str, import_path: GoImportPath, package_name: str) -> None:
        """Create an empty file.

        Args:
            filename: Output file name relative to the output root.
            import_path: Import path of the package this file belongs to.
                Identifiers declared in this package are never qualified.
            package_name: Go package name written in the package clause.

        """
        self.filename = filename
        self.import_path = import_path
        self.package_name = package_name
        self._lines: list[str] = []
        self._imports: dict[GoImportPath, str] = {}
        self._pending: list[tuple[str, Location]] = []
        self._annotated: list[tuple[str, Location, int]] = []

    def p(self, *parts: Fragment) -> None:
        """Emit one line built from ``parts``.

        ``GoIdent`` parts are qualified; everything else is converted with
        ``str()``.  Embedded newlines produce several lines.
        """
        text = "".join(self.qualified(part) if isinstance(part, GoIdent) else str(part) for part in parts)
        for symbol, location in self._pending:
            self._annotated.append((symbol, location, len(self._lines)))
        self._pending.clear()
        self._lines.extend(text.split("\n"))

    def qualified(self, ident: GoIdent) -> str:
        """Return ``ident`` as it must be spelled inside this file."""
        if ident.import_path == self.import_path:
            return ident.name
        alias = self._imports.get(ident.import_path)
        if alias is None:
            alias = self._new_alias(ident.import_path)
            self._imports[ident.import_path] = alias
        return f"{alias}.{ident.name}"

    def annotate(self, symbol: str, location: Location | None) -> None:
        """Attach ``location`` to ``symbol``, declared on the next emitted line."""
        if location is not None:
            self._pending.append((symbol, location))

    @property
    def imports(self) -> dict[str, str]:
        """Import path to alias for every package referenced so far."""
        return {path.path: alias for path, alias in self._imports.items()}

    def _new_alias(self, import_path: GoImportPath) -> str:
        base = import_path.name or clean_package_name(import_path.path.rsplit("/", 1)[-1])
        taken = set(self._imports.values()) | {self.package_name}
        alias = base
        n = 1
        while alias in taken:
            alias = f"{base}{n}"
            n += 1
        return alias

    # --- Assembly ---

    def _import_block(self) -> list[str]:
        if not self._imports:
            return []
        lines = ["import ("]
        for path, alias in sorted(self._imports.items(), key=lambda item: item[0].path):
            default = clean_package_name(path.path.rsplit("/", 1)[-1])
            lines.append(f"{go_quote(path.path)}" if alias == default else f"{alias} {go_quote(path.path)}")
        lines.append(")")
        lines.append("")
        return lines

    def _render(self) -> tuple[str, list[Annotation]]:
        raw = list(self._lines)
        line_map = list(range(len(raw)))
        for i, line in enumerate(raw):
            if line.startswith("package "):
                block = self._import_block()
                if block:
                    insert_at = i + 1
                    if insert_at < len(raw) and raw[insert_at] == "":
                        insert_at += 1
                    raw[insert_at:insert_at] = block
                    line_map = [j if j < insert_at else j + len(block) for j in line_map]
                break

        out: list[str] = []
        out_index: dict[int, int] = {}
        depth = 0
        for i, line in enumerate(raw):
            stripped = line.strip()
            if not stripped:
                if out and out[-1] != "":
                    out.append("")
                out_index[i] = len(out) - 1
                continue
            if stripped.startswith(("}", ")")):
                depth = max(depth - 1, 0)
            out_index[i] = len(out)
            out.append("\t" * depth + stripped)
            if not stripped.startswith("//") and stripped.endswith(("{", "(")):
                depth += 1
        while out and out[-1] == "":
            out.pop()
        text = "\n".join(out) + "\n"

        offsets: list[int] = []
        pos = 0
        for line in out:
            offsets.append(pos)
            pos += len(line.encode("utf-8")) + 1

        annotations: list[Annotation] = []
        for symbol, location, line_no in self._annotated:
            if line_no >= len(line_map):
                continue
            index = out_index.get(line_map[line_no])
            if index is None or index < 0:
                continue
            line = out[index]
            name = symbol.rsplit(".", 1)[-1]
            match = re.search(rf"\b{re.escape(name)}\b", line)
            if match is None:
                continue
            begin = offsets[index] + len(line[: match.start()].encode("utf-8"))
            annotations.append(Annotation(symbol, location, begin, begin + len(name.encode("utf-8"))))
        return text, annotations

    def content(self) -> str:
        """Return the complete, formatted file text."""
        return self._render()[0]

    def annotations(self) -> list[Annotation]:
        """Return annotated symbols with byte offsets into ``content()``."""
        return self._render()[1]

    def meta(self) -> str:
        """Return the annotations as a text-format ``GeneratedCodeInfo``."""
        info = descriptor_pb2.GeneratedCodeInfo()
        for annotation in self.annotations():
            entry = info.annotation.add()
            entry.path.extend(annotation.location.path)
            entry.source_file = annotation.location.source_file
            entry.begin = annotation.begin
            entry.end = annotation.end
        return text_format.MessageToString(info)
