# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Command-line entry points.

Two typer applications live here:

``protoc-gen-go-grpc`` (``plugin_app``)
    The ``protoc`` plugin.  Reads a ``CodeGeneratorRequest`` from stdin and
    writes the ``CodeGeneratorResponse`` to stdout.

``grpcgen`` (``app``)
    Works from a ``FileDescriptorSet`` on disk instead of ``protoc``'s pipe::

        protoc --include_imports --include_source_info \\
            --descriptor_set_out=greeter.pb greeter.proto
        grpcgen generate greeter.pb --out gen/
        grpcgen describe greeter.pb --format json
        grpcgen --debug generate greeter.pb --migration-mode

"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path
from typing import Annotated

import typer
from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from grpcgen import __version__, plugin
from grpcgen.gen import artifact_set
from grpcgen.logging_utils import JsonFormatter
from grpcgen.options import GeneratorOptions, GrpcGenError
from grpcgen.resolve import Resolver

# ---------------------------------------------------------------------------
# Option enums
# ---------------------------------------------------------------------------


class OutputFormat(StrEnum):
    """Output format for CLI commands."""

    auto = "auto"
    json = "json"
    table = "table"


class LogFormat(StrEnum):
    """Format of diagnostic log lines on stderr."""

    text = "text"
    json = "json"


class LogLevel(StrEnum):
    """Python logging level names accepted by ``--log-level``."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


_KNOWN_LOGGERS: list[tuple[str, str, str]] = [
    ("grpcgen", "Root logger for all generator output", "Enable everything at once"),
    ("grpcgen.plugin", "Plugin request/response handling and reported errors", "protoc reports a failure"),
    ("grpcgen.resolve", "Descriptor resolution: Go packages, services per file", "Wrong Go import path"),
    ("grpcgen.gen", "Per-file and per-service generation summaries", "Missing or unexpected output file"),
]

_TEXT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


def _configure_logging(
    level: LogLevel | None,
    *,
    debug: bool = False,
    targets: list[str] | None = None,
    log_format: LogFormat = LogFormat.text,
) -> None:
    """Attach a stderr handler to the selected loggers.

    Args:
        level: Level for the selected loggers; ``None`` leaves logging alone.
        debug: Shortcut for ``DEBUG``; wins over ``level``.
        targets: Logger names to configure; defaults to ``grpcgen``.
        log_format: Plain text or single-line JSON.

    """
    resolved = LogLevel.DEBUG if debug else level
    if resolved is None:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if log_format == LogFormat.json else logging.Formatter(_TEXT_LOG_FORMAT))
    known = {name for name, _, _ in _KNOWN_LOGGERS}
    for name in targets or ["grpcgen"]:
        if name not in known:
            typer.echo(f"Warning: unknown logger '{name}'", err=True)
        logger = logging.getLogger(name)
        logger.setLevel(resolved.value)
        logger.addHandler(handler)


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def _format_table(rows: list[dict[str, object]]) -> str:
    """Format rows as a simple column-aligned text table.

    Args:
        rows: List of dicts (all with the same keys).

    Returns:
        A formatted table string.

    """
    if not rows:
        return "(empty)"
    columns = list(rows[0].keys())
    widths = {col: len(col) for col in columns}
    str_rows: list[dict[str, str]] = []
    for row in rows:
        sr: dict[str, str] = {}
        for col in columns:
            s = str(row.get(col, ""))
            sr[col] = s
            widths[col] = max(widths[col], len(s))
        str_rows.append(sr)

    lines: list[str] = []
    lines.append("  ".join(col.ljust(widths[col]) for col in columns).rstrip())
    lines.append("  ".join("-" * widths[col] for col in columns))
    lines.extend("  ".join(sr[col].ljust(widths[col]) for col in columns).rstrip() for sr in str_rows)
    return "\n".join(lines)


def _print_rows(rows: list[dict[str, object]], fmt: OutputFormat) -> None:
    """Print rows as a table on a TTY (or when asked), JSON otherwise."""
    if fmt == OutputFormat.table or (fmt == OutputFormat.auto and sys.stdout.isatty()):
        typer.echo(_format_table(rows))
    else:
        typer.echo(json.dumps(rows, indent=2 if fmt == OutputFormat.auto else None, default=str))


def _load_descriptor_set(path: Path) -> descriptor_pb2.FileDescriptorSet:
    """Read a serialized ``FileDescriptorSet``."""
    fds = descriptor_pb2.FileDescriptorSet()
    try:
        fds.ParseFromString(path.read_bytes())
    except DecodeError as e:
        raise GrpcGenError(f"{path}: not a FileDescriptorSet ({e})") from None
    return fds


# ---------------------------------------------------------------------------
# grpcgen
# ---------------------------------------------------------------------------


@dataclass
class _CliConfig:
    """Holds resolved global CLI options."""

    format: OutputFormat = OutputFormat.auto


app = typer.Typer(
    name="grpcgen",
    help="Generate gRPC-Go service code from protobuf descriptor sets.",
    add_completion=False,
    no_args_is_help=True,
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"grpcgen {__version__}")
        raise typer.Exit()


@app.callback()
def _main(
    ctx: typer.Context,
    fmt: Annotated[OutputFormat, typer.Option("--format", "-f", help="Output format")] = OutputFormat.auto,
    debug: Annotated[bool, typer.Option("--debug", help="Log everything at DEBUG level to stderr")] = False,
    log_level: Annotated[LogLevel | None, typer.Option("--log-level", help="Log level for --log-logger")] = None,
    log_logger: Annotated[
        list[str] | None, typer.Option("--log-logger", help="Logger to configure (repeatable)")
    ] = None,
    log_format: Annotated[LogFormat, typer.Option("--log-format", help="Log line format")] = LogFormat.text,
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=_version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """Configure output and logging options."""
    _configure_logging(log_level, debug=debug, targets=log_logger, log_format=log_format)
    ctx.obj = _CliConfig(format=fmt)


@app.command("generate")
def generate_cmd(
    descriptor_set: Annotated[Path, typer.Argument(help="FileDescriptorSet written by protoc", exists=True)],
    out: Annotated[Path, typer.Option("--out", "-o", help="Output directory")] = Path("."),
    files: Annotated[list[str] | None, typer.Option("--file", help="Only generate this .proto file")] = None,
    migration_mode: Annotated[
        bool, typer.Option("--migration-mode", help="Omit client stubs and stream wrapper types")
    ] = False,
    params: Annotated[list[str] | None, typer.Option("--param", "-P", help="Plugin parameter key=value")] = None,
) -> None:
    """Write one _grpc.pb.go file per .proto file that declares services."""
    parameter = list(params or [])
    if migration_mode:
        parameter.append("migration_mode=true")
    try:
        request = plugin.request_from_descriptor_set(
            _load_descriptor_set(descriptor_set),
            files=files or (),
            parameter=",".join(parameter),
        )
    except GrpcGenError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    response = plugin.generate(request)
    if response.error:
        typer.echo(f"Error: {response.error}", err=True)
        raise typer.Exit(1)
    for generated in response.file:
        target = out / generated.name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(generated.content, encoding="utf-8")
        typer.echo(str(target))


@app.command()
def describe(
    ctx: typer.Context,
    descriptor_set: Annotated[Path, typer.Argument(help="FileDescriptorSet written by protoc", exists=True)],
    files: Annotated[list[str] | None, typer.Option("--file", help="Only describe this .proto file")] = None,
    migration_mode: Annotated[bool, typer.Option("--migration-mode", help="Describe migration-lite output")] = False,
    params: Annotated[list[str] | None, typer.Option("--param", "-P", help="Plugin parameter key=value")] = None,
) -> None:
    """List every method with its RPC shape and the artifacts generated for it."""
    config: _CliConfig = ctx.obj
    parameter = list(params or [])
    if migration_mode:
        parameter.append("migration_mode=true")
    rows: list[dict[str, object]] = []
    try:
        fds = _load_descriptor_set(descriptor_set)
        options = GeneratorOptions.from_parameter(",".join(parameter))
        resolver = Resolver(fds.file, options)
        for name in files or [fd.name for fd in fds.file]:
            proto = resolver.resolve_file(name)
            for service in proto.services:
                for method in service.methods:
                    artifacts = sorted(a.value for a in artifact_set(proto, method, options.mode))
                    rows.append(
                        {
                            "file": proto.path,
                            "service": service.full_name,
                            "method": method.name,
                            "shape": method.shape.value,
                            "deprecated": method.deprecated,
                            "artifacts": artifacts if config.format == OutputFormat.json else ",".join(artifacts),
                        }
                    )
    except GrpcGenError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None
    _print_rows(rows, config.format)


@app.command()
def loggers(ctx: typer.Context) -> None:
    """List the logger names used by grpcgen."""
    config: _CliConfig = ctx.obj
    rows: list[dict[str, object]] = [
        {"name": name, "description": description, "scenario": scenario} for name, description, scenario in _KNOWN_LOGGERS
    ]
    _print_rows(rows, config.format)


# ---------------------------------------------------------------------------
# protoc-gen-go-grpc
# ---------------------------------------------------------------------------

plugin_app = typer.Typer(
    name="protoc-gen-go-grpc",
    help="protoc plugin generating gRPC-Go service code.",
    add_completion=False,
)


@plugin_app.command()
def _plugin(
    version: Annotated[bool, typer.Option("--version", "-V", help="Show version and exit")] = False,
    log_level: Annotated[LogLevel | None, typer.Option("--log-level", help="Log to stderr at this level")] = None,
    log_format: Annotated[LogFormat, typer.Option("--log-format", help="Log line format")] = LogFormat.text,
) -> None:
    """Read a CodeGeneratorRequest on stdin and write the response to stdout."""
    if version:
        typer.echo(f"protoc-gen-go-grpc {__version__}")
        raise typer.Exit()
    _configure_logging(log_level, log_format=log_format)
    try:
        response = plugin.generate(plugin.read_request(typer.get_binary_stream("stdin")))
    except GrpcGenError as e:
        response = plugin.error_response(e)
    plugin.write_response(response, typer.get_binary_stream("stdout"))
