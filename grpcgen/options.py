# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Generator configuration parsed from the ``protoc`` plugin parameter.

``protoc --go-grpc_out=migration_mode=true,paths=source_relative:out`` passes
``migration_mode=true,paths=source_relative`` to the plugin.  Recognised
keys:

- ``migration_mode``: emit only server dispatch, registration and the
  unstable interface (no client stubs, no stream wrapper types).
- ``paths``: ``import`` (default) or ``source_relative``.
- ``module``: strip this Go import path prefix from output file names.
- ``annotate_code``: also write a ``.meta`` file with symbol annotations.
- ``M<file.proto>=<import path>``: Go import path for a ``.proto`` file.

The resulting ``GeneratorOptions`` is immutable and is passed explicitly to
every builder; nothing reads configuration from module-level state.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, StrEnum
from types import MappingProxyType

__all__ = [
    "GenerationMode",
    "GeneratorOptions",
    "GrpcGenError",
    "ParameterError",
    "PathsMode",
    "parse_bool",
]


class GrpcGenError(Exception):
    """Base class for errors reported back to ``protoc``."""


class ParameterError(GrpcGenError):
    """Raised when the plugin parameter string cannot be parsed."""


class GenerationMode(Enum):
    """Selects how much code is emitted per service."""

    FULL = "full"
    MIGRATION_LITE = "migration_lite"

    @property
    def emits_client(self) -> bool:
        """Whether the client stub builder runs."""
        return self is GenerationMode.FULL

    @property
    def emits_stream_types(self) -> bool:
        """Whether client and server stream wrapper types are emitted."""
        return self is GenerationMode.FULL


class PathsMode(StrEnum):
    """Output file placement."""

    IMPORT = "import"
    SOURCE_RELATIVE = "source_relative"


_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


def parse_bool(key: str, value: str | None) -> bool:
    """Parse a boolean parameter value; a bare key means ``True``."""
    if value is None:
        return True
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ParameterError(f'bad value for parameter "{key}": {value!r} is not a boolean')


@dataclass(frozen=True)
class GeneratorOptions:
    """Immutable configuration for one generation pass.

    Attributes:
        mode: Full or migration-lite generation.
        paths: Output file placement.
        module: Import path prefix stripped from output names, if any.
        annotate_code: Write ``.meta`` annotation files.
        import_paths: ``.proto`` path to Go import path overrides.

    """

    mode: GenerationMode = GenerationMode.FULL
    paths: PathsMode = PathsMode.IMPORT
    module: str | None = None
    annotate_code: bool = False
    import_paths: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def migration_mode(self) -> bool:
        """Whether client stubs and stream wrapper types are suppressed."""
        return self.mode is GenerationMode.MIGRATION_LITE

    @classmethod
    def from_parameter(cls, parameter: str) -> GeneratorOptions:
        """Parse a comma-separated ``key=value`` parameter string.

        Args:
            parameter: The raw ``CodeGeneratorRequest.parameter`` value.

        Returns:
            The parsed options.

        Raises:
            ParameterError: On an unknown key or malformed value.

        """
        mode = GenerationMode.FULL
        paths = PathsMode.IMPORT
        module: str | None = None
        annotate_code = False
        import_paths: dict[str, str] = {}

        for item in parameter.split(","):
            item = item.strip()
            if not item:
                continue
            key, sep, raw = item.partition("=")
            value: str | None = raw if sep else None
            if key.startswith("M") and len(key) > 1:
                if not value:
                    raise ParameterError(f'parameter "{key}" requires a Go import path')
                import_paths[key[1:]] = value
            elif key == "migration_mode":
                mode = GenerationMode.MIGRATION_LITE if parse_bool(key, value) else GenerationMode.FULL
            elif key == "paths":
                try:
                    paths = PathsMode(value or "")
                except ValueError:
                    raise ParameterError(f'unknown "paths" value: {value!r}') from None
            elif key == "module":
                if not value:
                    raise ParameterError('parameter "module" requires a value')
                module = value
            elif key == "annotate_code":
                annotate_code = parse_bool(key, value)
            else:
                raise ParameterError(f'unknown parameter "{key}"')

        if module is not None and paths is PathsMode.SOURCE_RELATIVE:
            raise ParameterError('cannot use "module=" with "paths=source_relative"')

        return cls(
            mode=mode,
            paths=paths,
            module=module,
            annotate_code=annotate_code,
            import_paths=MappingProxyType(import_paths),
        )
