"""Shared test fixtures for grpcgen tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest
from google.protobuf import descriptor_pb2

from grpcgen.emit import GoImportPath
from grpcgen.model import Method, ProtoFile, Service

HELLOWORLD = GoImportPath("example.com/helloworld")

MethodFactory = Callable[..., Method]
"""Type alias for the ``make_method`` fixture return type."""

FileFactory = Callable[..., ProtoFile]
"""Type alias for the ``make_file`` fixture return type."""


def _make_method(
    name: str,
    *,
    client_streaming: bool = False,
    server_streaming: bool = False,
    deprecated: bool = False,
    comments: str = "",
    input_name: str = "HelloRequest",
    output_name: str = "HelloReply",
) -> Method:
    return Method(
        name=name,
        go_name=name,
        input=HELLOWORLD.ident(input_name),
        output=HELLOWORLD.ident(output_name),
        client_streaming=client_streaming,
        server_streaming=server_streaming,
        deprecated=deprecated,
        leading_comments=comments,
    )


def _make_file(
    *methods: Method,
    service: str = "Greeter",
    package: str = "helloworld",
    deprecated: bool = False,
) -> ProtoFile:
    svc = Service(
        name=service,
        go_name=service,
        full_name=f"{package}.{service}",
        methods=methods,
        deprecated=deprecated,
    )
    return ProtoFile(
        path="helloworld.proto",
        go_package_name="helloworld",
        go_import_path=HELLOWORLD,
        generated_filename_prefix="helloworld",
        services=(svc,),
    )


@pytest.fixture
def make_method() -> MethodFactory:
    """Factory for standalone methods in the ``example.com/helloworld`` package."""
    return _make_method


@pytest.fixture
def make_file() -> FileFactory:
    """Factory wrapping methods into a one-service ``helloworld.proto`` file."""
    return _make_file


@pytest.fixture
def greeter_file() -> ProtoFile:
    """One service covering all four shapes plus a deprecated method."""
    return _make_file(
        _make_method("SayHello", comments=" Sends a greeting\n"),
        _make_method("Subscribe", server_streaming=True),
        _make_method("Upload", client_streaming=True, input_name="Chunk", output_name="UploadSummary"),
        _make_method(
            "Chat",
            client_streaming=True,
            server_streaming=True,
            input_name="ChatMessage",
            output_name="ChatMessage",
        ),
        _make_method("SayGoodbye", deprecated=True),
    )


# ---------------------------------------------------------------------------
# Descriptor fixtures
# ---------------------------------------------------------------------------


def _common_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fd = descriptor_pb2.FileDescriptorProto(name="common/empty.proto", package="common", syntax="proto3")
    fd.options.go_package = "example.com/common;commonpb"
    fd.message_type.add(name="Empty")
    return fd


def _greeter_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fd = descriptor_pb2.FileDescriptorProto(
        name="helloworld/helloworld.proto",
        package="helloworld",
        syntax="proto3",
        dependency=["common/empty.proto"],
    )
    fd.options.go_package = "example.com/helloworld;helloworld"
    for message in ("HelloRequest", "HelloReply", "Chunk", "UploadSummary", "ChatMessage"):
        fd.message_type.add(name=message)
    outer = fd.message_type.add(name="Outer")
    outer.nested_type.add(name="inner_msg")

    svc = fd.service.add(name="Greeter")
    svc.method.add(name="SayHello", input_type=".helloworld.HelloRequest", output_type=".helloworld.HelloReply")
    svc.method.add(
        name="Subscribe",
        input_type=".helloworld.HelloRequest",
        output_type=".helloworld.HelloReply",
        server_streaming=True,
    )
    svc.method.add(
        name="Upload",
        input_type=".helloworld.Chunk",
        output_type=".helloworld.UploadSummary",
        client_streaming=True,
    )
    svc.method.add(
        name="Chat",
        input_type=".helloworld.ChatMessage",
        output_type=".helloworld.ChatMessage",
        client_streaming=True,
        server_streaming=True,
    )
    goodbye = svc.method.add(name="say_goodbye", input_type=".common.Empty", output_type=".helloworld.Outer.inner_msg")
    goodbye.options.deprecated = True

    fd.source_code_info.location.add(path=[6, 0], leading_comments=" The greeting service.\n")
    fd.source_code_info.location.add(path=[6, 0, 2, 0], leading_comments=" Sends a greeting\n")
    return fd


def _messages_only_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fd = descriptor_pb2.FileDescriptorProto(name="helloworld/types.proto", package="helloworld", syntax="proto3")
    fd.options.go_package = "example.com/helloworld;helloworld"
    fd.message_type.add(name="Unused")
    return fd


@pytest.fixture
def descriptors() -> list[descriptor_pb2.FileDescriptorProto]:
    """``common/empty.proto``, ``helloworld/helloworld.proto`` and a file without services."""
    return [_common_descriptor(), _greeter_descriptor(), _messages_only_descriptor()]


@pytest.fixture
def descriptor_set_path(tmp_path: Path, descriptors: list[descriptor_pb2.FileDescriptorProto]) -> Path:
    """The ``descriptors`` fixture serialized as a FileDescriptorSet on disk."""
    fds = descriptor_pb2.FileDescriptorSet(file=descriptors)
    path = tmp_path / "greeter.pb"
    path.write_bytes(fds.SerializeToString())
    return path
