# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""gRPC-Go service code generator, usable as a ``protoc`` plugin."""

__version__ = "1.0.0"

from grpcgen.emit import GeneratedFile, GoIdent, GoImportPath, Location, go_quote
from grpcgen.gen import (
    Artifact,
    ArtifactKind,
    Decl,
    Member,
    ServiceDescriptor,
    artifact_set,
    build_service_artifacts,
    generate_file,
    service_descriptor,
)
from grpcgen.model import Method, ProtoFile, Service, Shape, classify
from grpcgen.naming import export, unexport
from grpcgen.options import GenerationMode, GeneratorOptions, GrpcGenError, ParameterError, PathsMode
from grpcgen.plugin import generate
from grpcgen.resolve import GenerationError, Resolver

__all__ = [
    "Artifact",
    "ArtifactKind",
    "Decl",
    "GeneratedFile",
    "GenerationError",
    "GenerationMode",
    "GeneratorOptions",
    "GoIdent",
    "GoImportPath",
    "GrpcGenError",
    "Location",
    "Member",
    "Method",
    "ParameterError",
    "PathsMode",
    "ProtoFile",
    "Resolver",
    "Service",
    "ServiceDescriptor",
    "Shape",
    "__version__",
    "artifact_set",
    "build_service_artifacts",
    "classify",
    "export",
    "generate",
    "generate_file",
    "go_quote",
    "service_descriptor",
    "unexport",
]
