# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Build the generation model from protobuf file descriptors.

``Resolver`` indexes every ``FileDescriptorProto`` in a request (the files to
generate plus all of their dependencies) so that message references such as
``.helloworld.HelloRequest`` resolve to a ``GoIdent`` in the right Go
package.  Naming follows protoc-gen-go:

- Go package: ``M<file>=<path>`` parameter, else ``option go_package``
  (``"path;name"`` or just ``"path"``).
- Message names: ``GoCamelCase`` of the package-relative dotted name
  (``Outer.inner_msg`` becomes ``OuterInnerMsg``, ``Outer.Inner`` becomes
  ``Outer_Inner``).
- Service and method names: ``GoCamelCase`` of the declared name.

Comments and source locations come from ``source_code_info`` when ``protoc``
was run with it (it always is for plugins).
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Iterable

from google.protobuf import descriptor_pb2

from grpcgen.emit import GoIdent, GoImportPath, Location, clean_package_name
from grpcgen.model import Method, ProtoFile, Service
from grpcgen.naming import go_camel_case
from grpcgen.options import GeneratorOptions, GrpcGenError, PathsMode

__all__ = ["GenerationError", "Resolver"]

_logger = logging.getLogger("grpcgen.resolve")

# FileDescriptorProto field numbers used in SourceCodeInfo paths.
_SERVICE_FIELD = 6
_METHOD_FIELD = 2


class GenerationError(GrpcGenError):
    """Raised when the descriptors cannot be turned into a generation model."""


class Resolver:
    """Resolves ``FileDescriptorProto`` messages into ``ProtoFile`` models."""

    def __init__(self, files: Iterable[descriptor_pb2.FileDescriptorProto], options: GeneratorOptions) -> None:
        """Index ``files`` for message lookup.

        Args:
            files: Every file in the request, dependencies included.
            options: Parsed generator options.

        """
        self._options = options
        self._files: dict[str, descriptor_pb2.FileDescriptorProto] = {}
        self._messages: dict[str, tuple[str, str]] = {}
        for fd in files:
            self._files[fd.name] = fd
            prefix = f".{fd.package}" if fd.package else ""
            for message in fd.message_type:
                self._index_message(fd.name, prefix, message, "")

    def _index_message(
        self,
        file_name: str,
        scope: str,
        message: descriptor_pb2.DescriptorProto,
        parent: str,
    ) -> None:
        # Go names come from the package-relative dotted name in one pass.
        relative_name = f"{parent}.{message.name}" if parent else message.name
        full_name = f"{scope}.{message.name}"
        self._messages[full_name] = (file_name, go_camel_case(relative_name))
        for nested in message.nested_type:
            self._index_message(file_name, full_name, nested, relative_name)

    # --- Go package resolution ---

    def _go_package(self, fd: descriptor_pb2.FileDescriptorProto) -> tuple[GoImportPath, str]:
        go_package = fd.options.go_package
        path, _, name = go_package.partition(";")
        mapped = self._options.import_paths.get(fd.name)
        if mapped is not None:
            path, _, name = mapped.partition(";")
        if not path:
            raise GenerationError(
                f'unable to determine Go import path for "{fd.name}"; '
                f'set "option go_package" or pass "M{fd.name}=<import path>"'
            )
        if not name:
            name = clean_package_name(posixpath.basename(path))
        return GoImportPath(path, name), name

    def go_import_path(self, file_name: str) -> GoImportPath:
        """Go import path of the package generated for ``file_name``."""
        return self._go_package(self._file(file_name))[0]

    def _file(self, name: str) -> descriptor_pb2.FileDescriptorProto:
        try:
            return self._files[name]
        except KeyError:
            raise GenerationError(f'file "{name}" is not in the request') from None

    def message_ident(self, full_name: str) -> GoIdent:
        """Resolve a fully-qualified message name (``.pkg.Msg``) to its Go identifier."""
        try:
            file_name, go_name = self._messages[full_name]
        except KeyError:
            raise GenerationError(f"unknown message type {full_name}") from None
        return GoIdent(go_name, self.go_import_path(file_name))

    def _filename_prefix(self, fd: descriptor_pb2.FileDescriptorProto, import_path: GoImportPath) -> str:
        stem = fd.name
        ext = posixpath.splitext(stem)[1]
        if ext:
            stem = stem[: -len(ext)]
        if self._options.paths is PathsMode.SOURCE_RELATIVE:
            return stem
        prefix = posixpath.join(import_path.path, posixpath.basename(stem))
        module = self._options.module
        if module is not None:
            if not prefix.startswith(module + "/"):
                raise GenerationError(f'"{prefix}" does not have expected prefix "{module}"')
            prefix = prefix[len(module) + 1 :]
        return prefix

    # --- File resolution ---

    def resolve_file(self, name: str) -> ProtoFile:
        """Build the ``ProtoFile`` model for ``name``.

        Raises:
            GenerationError: When the Go package or a message type cannot be
                resolved.

        """
        fd = self._file(name)
        import_path, package_name = self._go_package(fd)
        locations = {tuple(loc.path): loc for loc in fd.source_code_info.location}

        services = []
        for si, sd in enumerate(fd.service):
            services.append(self._resolve_service(fd, si, sd, locations))

        _logger.debug("Resolved %s: package=%s, services=%d", name, package_name, len(services))
        return ProtoFile(
            path=fd.name,
            go_package_name=package_name,
            go_import_path=import_path,
            generated_filename_prefix=self._filename_prefix(fd, import_path),
            services=tuple(services),
        )

    def _resolve_service(
        self,
        fd: descriptor_pb2.FileDescriptorProto,
        index: int,
        sd: descriptor_pb2.ServiceDescriptorProto,
        locations: dict[tuple[int, ...], descriptor_pb2.SourceCodeInfo.Location],
    ) -> Service:
        path = (_SERVICE_FIELD, index)
        methods = []
        for mi, md in enumerate(sd.method):
            method_path = (*path, _METHOD_FIELD, mi)
            loc = locations.get(method_path)
            methods.append(
                Method(
                    name=md.name,
                    go_name=go_camel_case(md.name),
                    input=self.message_ident(md.input_type),
                    output=self.message_ident(md.output_type),
                    client_streaming=md.client_streaming,
                    server_streaming=md.server_streaming,
                    deprecated=md.options.deprecated,
                    leading_comments=loc.leading_comments if loc is not None else "",
                    location=Location(fd.name, method_path),
                )
            )
        loc = locations.get(path)
        return Service(
            name=sd.name,
            go_name=go_camel_case(sd.name),
            full_name=f"{fd.package}.{sd.name}" if fd.package else sd.name,
            methods=tuple(methods),
            deprecated=sd.options.deprecated,
            leading_comments=loc.leading_comments if loc is not None else "",
            location=Location(fd.name, path),
        )
