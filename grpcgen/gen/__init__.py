# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""gRPC-Go service code generation.

For every service in a ``.proto`` file the builders run in a fixed order and
each returns structured ``Decl`` nodes:

1. client stub (``_client.py``; skipped in migration-lite mode)
2. server dispatch struct, adapters and stream types (``_server.py``)
3. unstable interface (``_unstable.py``)
4. registration function (``_register.py``)
5. capability-checked service constructor (``_server.py``)

``generate_file`` renders the nodes through ``render_decl`` into a
``GeneratedFile``.  Builders only read the resolved model and the explicit
``GenerationMode``; the same input always yields byte-identical output.
"""

from __future__ import annotations

import logging
from enum import Enum

from grpcgen.emit import GeneratedFile
from grpcgen.gen._client import build_client
from grpcgen.gen._common import GRPC_PACKAGE
from grpcgen.gen._nodes import ArtifactKind, Decl, Line, Member, plain
from grpcgen.gen._register import (
    MethodEntry,
    ServiceDescriptor,
    StreamEntry,
    build_registration,
    service_descriptor,
)
from grpcgen.gen._render import render_decl
from grpcgen.gen._server import build_dispatch, build_service_constructor
from grpcgen.gen._unstable import build_unstable_interface
from grpcgen.model import Method, ProtoFile, Service
from grpcgen.options import GenerationMode

__all__ = [
    "Artifact",
    "ArtifactKind",
    "Decl",
    "Line",
    "Member",
    "MethodEntry",
    "ServiceDescriptor",
    "StreamEntry",
    "artifact_set",
    "build_client",
    "build_dispatch",
    "build_registration",
    "build_service_artifacts",
    "build_service_constructor",
    "build_unstable_interface",
    "generate_file",
    "generate_file_content",
    "output_filename",
    "plain",
    "render_decl",
    "service_descriptor",
]

_logger = logging.getLogger("grpcgen.gen")

GENERATED_HEADER = "// Code generated by protoc-gen-go-grpc. DO NOT EDIT."
OUTPUT_SUFFIX = "_grpc.pb.go"


class Artifact(Enum):
    """Per-method artifacts that may appear in a generated file."""

    CLIENT_INTERFACE_METHOD = "client-interface-method"
    CLIENT_IMPL_METHOD = "client-impl-method"
    CLIENT_STREAM_TYPE = "client-stream-type"
    SERVER_HANDLER_FIELD = "server-handler-field"
    SERVER_ADAPTER_FUNCTION = "server-adapter-function"
    SERVER_STREAM_TYPE = "server-stream-type"
    UNSTABLE_INTERFACE_METHOD = "unstable-interface-method"
    REGISTRATION_ENTRY = "registration-entry"


_MEMBER_ARTIFACTS = {
    ArtifactKind.CLIENT_INTERFACE: Artifact.CLIENT_INTERFACE_METHOD,
    ArtifactKind.SERVICE_STRUCT: Artifact.SERVER_HANDLER_FIELD,
    ArtifactKind.UNSTABLE_INTERFACE: Artifact.UNSTABLE_INTERFACE_METHOD,
}

_DECL_ARTIFACTS = {
    ArtifactKind.CLIENT_METHOD: Artifact.CLIENT_IMPL_METHOD,
    ArtifactKind.CLIENT_STREAM_INTERFACE: Artifact.CLIENT_STREAM_TYPE,
    ArtifactKind.SERVER_ADAPTER: Artifact.SERVER_ADAPTER_FUNCTION,
    ArtifactKind.SERVER_STREAM_INTERFACE: Artifact.SERVER_STREAM_TYPE,
}


def build_service_artifacts(file: ProtoFile, service: Service, mode: GenerationMode) -> list[Decl]:
    """Run every builder for ``service`` and return the declarations in output order."""
    decls = build_client(service, mode)
    decls += build_dispatch(service, mode)
    decls.append(build_unstable_interface(service))
    decls.append(build_registration(file, service))
    decls.append(build_service_constructor(service))
    return decls


def artifact_set(file: ProtoFile, method: Method, mode: GenerationMode) -> frozenset[Artifact]:
    """Return the artifacts emitted for ``method`` under ``mode``.

    Derived from the declaration tree, so it reflects exactly what the
    renderer will write.
    """
    service = method.service
    found: set[Artifact] = set()
    for decl in build_service_artifacts(file, service, mode):
        member_artifact = _MEMBER_ARTIFACTS.get(decl.kind)
        if member_artifact is not None and any(m.method == method.go_name for m in decl.members):
            found.add(member_artifact)
        decl_artifact = _DECL_ARTIFACTS.get(decl.kind)
        if decl_artifact is not None and decl.method == method.go_name:
            found.add(decl_artifact)
    sd = service_descriptor(file, service)
    if any(e.method_name == method.name for e in sd.methods) or any(e.stream_name == method.name for e in sd.streams):
        found.add(Artifact.REGISTRATION_ENTRY)
    return frozenset(found)


def output_filename(file: ProtoFile) -> str:
    """Name of the generated file for ``file``."""
    return file.generated_filename_prefix + OUTPUT_SUFFIX


def generate_file(file: ProtoFile, mode: GenerationMode) -> GeneratedFile | None:
    """Generate the ``_grpc.pb.go`` file for ``file``.

    Args:
        file: The resolved ``.proto`` file.
        mode: Full or migration-lite generation.

    Returns:
        The generated file, or ``None`` when ``file`` declares no services.

    """
    if not file.services:
        _logger.debug("Skipping %s: no services", file.path)
        return None
    g = GeneratedFile(output_filename(file), file.go_import_path, file.go_package_name)
    g.p(GENERATED_HEADER)
    g.p()
    g.p("package ", file.go_package_name)
    g.p()
    generate_file_content(file, g, mode)
    _logger.info(
        "Generated %s: services=%d, mode=%s",
        g.filename,
        len(file.services),
        mode.value,
        extra={"proto_file": file.path},
    )
    return g


def generate_file_content(file: ProtoFile, g: GeneratedFile, mode: GenerationMode) -> None:
    """Write the service definitions for ``file`` into ``g``, excluding the package clause."""
    if not file.services:
        return
    g.p("// This is a compile-time assertion to ensure that this generated file")
    g.p("// is compatible with the grpc package it is being compiled against.")
    g.p("const _ = ", GRPC_PACKAGE.ident("SupportPackageIsVersion7"))
    g.p()
    for service in file.services:
        _logger.debug("Generating service %s: methods=%d", service.full_name, len(service.methods))
        for decl in build_service_artifacts(file, service, mode):
            render_decl(g, decl)
