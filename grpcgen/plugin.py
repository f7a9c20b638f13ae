# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""``protoc`` plugin protocol.

``protoc`` writes a serialized ``CodeGeneratorRequest`` to the plugin's
stdin and reads a ``CodeGeneratorResponse`` from its stdout.  Problems with
the request (bad parameters, unresolvable Go packages) are reported through
``CodeGeneratorResponse.error`` so ``protoc`` can print them next to the
offending file; the plugin process itself still exits successfully.

Usage::

    protoc --go-grpc_out=. --go-grpc_opt=paths=source_relative helloworld.proto
    protoc --go-grpc_out=migration_mode=true:. helloworld.proto
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import BinaryIO

from google.protobuf import descriptor_pb2
from google.protobuf.compiler import plugin_pb2
from google.protobuf.message import DecodeError

from grpcgen.gen import generate_file
from grpcgen.options import GeneratorOptions, GrpcGenError
from grpcgen.resolve import Resolver

__all__ = [
    "error_response",
    "generate",
    "read_request",
    "request_from_descriptor_set",
    "write_response",
]

_logger = logging.getLogger("grpcgen.plugin")


def generate(request: plugin_pb2.CodeGeneratorRequest) -> plugin_pb2.CodeGeneratorResponse:
    """Generate every file named in ``request.file_to_generate``.

    Args:
        request: The decoded request from ``protoc``.

    Returns:
        A response holding one ``_grpc.pb.go`` file per input file that
        declares at least one service, or an ``error`` message.

    """
    response = plugin_pb2.CodeGeneratorResponse()
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
    try:
        options = GeneratorOptions.from_parameter(request.parameter)
        resolver = Resolver(request.proto_file, options)
        for name in request.file_to_generate:
            g = generate_file(resolver.resolve_file(name), options.mode)
            if g is None:
                continue
            out = response.file.add()
            out.name = g.filename
            out.content = g.content()
            if options.annotate_code:
                meta = response.file.add()
                meta.name = g.filename + ".meta"
                meta.content = g.meta()
    except GrpcGenError as e:
        return error_response(e)
    _logger.debug("Response: files=%d", len(response.file))
    return response


def error_response(error: GrpcGenError) -> plugin_pb2.CodeGeneratorResponse:
    """Log ``error`` and wrap it in a response carrying no files."""
    _logger.error("Generation failed: %s", error)
    response = plugin_pb2.CodeGeneratorResponse(error=str(error))
    response.supported_features = plugin_pb2.CodeGeneratorResponse.FEATURE_PROTO3_OPTIONAL
    return response


def read_request(stream: BinaryIO) -> plugin_pb2.CodeGeneratorRequest:
    """Read and decode a ``CodeGeneratorRequest`` from ``stream``.

    Raises:
        GrpcGenError: When the input is not a serialized request.

    """
    data = stream.read()
    request = plugin_pb2.CodeGeneratorRequest()
    try:
        request.ParseFromString(data)
    except DecodeError as e:
        raise GrpcGenError(f"stdin: not a CodeGeneratorRequest ({e})") from None
    _logger.debug(
        "Request: bytes=%d, files_to_generate=%d, parameter=%r",
        len(data),
        len(request.file_to_generate),
        request.parameter,
    )
    return request


def write_response(response: plugin_pb2.CodeGeneratorResponse, stream: BinaryIO) -> None:
    """Serialize ``response`` to ``stream`` and flush it."""
    stream.write(response.SerializeToString())
    stream.flush()


def request_from_descriptor_set(
    descriptor_set: descriptor_pb2.FileDescriptorSet,
    *,
    files: Iterable[str] = (),
    parameter: str = "",
) -> plugin_pb2.CodeGeneratorRequest:
    """Build a request from a ``FileDescriptorSet`` written by ``protoc --descriptor_set_out``.

    Args:
        descriptor_set: Files to consider; should include imports
            (``--include_imports``) so message references resolve.
        files: Names of the files to generate; every file in the set when empty.
        parameter: Plugin parameter string.

    Returns:
        The equivalent ``CodeGeneratorRequest``.

    """
    request = plugin_pb2.CodeGeneratorRequest()
    request.parameter = parameter
    request.proto_file.extend(descriptor_set.file)
    selected = list(files) or [fd.name for fd in descriptor_set.file]
    request.file_to_generate.extend(selected)
    return request
