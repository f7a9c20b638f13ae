# © Copyright 2025-2026, Query.Farm LLC - https://query.farm
# SPDX-License-Identifier: Apache-2.0

"""Identifier rules shared by every builder.

Exported identifiers start with an upper-case letter.  The unexported form
of an identifier is the exported form with its first character lower-cased;
``export(unexport(name)) == name`` for any name that starts with an upper-case
ASCII letter.

Auxiliary type names are derived from the service and method Go names::

    Greeter + Chat  ->  Greeter_ChatClient   (exported client stream interface)
                        greeterChatClient    (unexported client stream struct)
                        Greeter_ChatServer   (exported server stream interface)
                        greeterChatServer    (unexported server stream struct)
                        greeterChatStreamDesc
"""

from __future__ import annotations

__all__ = [
    "adapter_name",
    "client_impl_name",
    "client_name",
    "client_stream_impl_name",
    "client_stream_interface_name",
    "export",
    "full_method_name",
    "go_camel_case",
    "new_client_func_name",
    "new_service_func_name",
    "register_func_name",
    "server_stream_impl_name",
    "server_stream_interface_name",
    "service_type_name",
    "stream_desc_name",
    "unexport",
    "unstable_service_name",
]


def unexport(name: str) -> str:
    """Return ``name`` with its first character lower-cased."""
    return name[:1].lower() + name[1:]


def export(name: str) -> str:
    """Return ``name`` with its first character upper-cased."""
    return name[:1].upper() + name[1:]


def _is_lower(c: str) -> bool:
    return "a" <= c <= "z"


def _is_digit(c: str) -> bool:
    return "0" <= c <= "9"


def go_camel_case(s: str) -> str:
    """Convert a protobuf identifier to its Go form.

    ``_`` and ``.`` separated words become CamelCase: ``say_hello`` becomes
    ``SayHello`` and ``foo.bar`` becomes ``Foo_Bar``.  A leading underscore
    turns into ``X`` so the result is always exported.

    Args:
        s: The protobuf identifier.

    Returns:
        The exported Go identifier.

    """
    out: list[str] = []
    i = 0
    n = len(s)
    while i < n:
        c = s[i]
        if c == "." and i + 1 < n and _is_lower(s[i + 1]):
            pass
        elif c == ".":
            out.append("_")
        elif c == "_" and (i == 0 or s[i - 1] == "."):
            out.append("X")
        elif c == "_" and i + 1 < n and _is_lower(s[i + 1]):
            pass
        elif _is_digit(c):
            out.append(c)
        else:
            out.append(c.upper() if _is_lower(c) else c)
            while i + 1 < n and _is_lower(s[i + 1]):
                i += 1
                out.append(s[i])
        i += 1
    return "".join(out)


# ---------------------------------------------------------------------------
# Per-service names
# ---------------------------------------------------------------------------


def client_name(service: str) -> str:
    """Exported client interface name, e.g. ``GreeterClient``."""
    return service + "Client"


def client_impl_name(service: str) -> str:
    """Unexported client struct name, e.g. ``greeterClient``."""
    return unexport(client_name(service))


def new_client_func_name(service: str) -> str:
    return "New" + client_name(service)


def service_type_name(service: str) -> str:
    """Handler-table struct name, e.g. ``GreeterService``."""
    return service + "Service"


def unstable_service_name(service: str) -> str:
    return "Unstable" + service_type_name(service)


def register_func_name(service: str) -> str:
    return "Register" + service_type_name(service)


def new_service_func_name(service: str) -> str:
    return "New" + service_type_name(service)


# ---------------------------------------------------------------------------
# Per-method names
# ---------------------------------------------------------------------------


def client_stream_interface_name(service: str, method: str) -> str:
    return f"{service}_{method}Client"


def client_stream_impl_name(service: str, method: str) -> str:
    return unexport(service) + method + "Client"


def server_stream_interface_name(service: str, method: str) -> str:
    return f"{service}_{method}Server"


def server_stream_impl_name(service: str, method: str) -> str:
    return unexport(service) + method + "Server"


def stream_desc_name(service: str, method: str) -> str:
    return unexport(service) + method + "StreamDesc"


def adapter_name(method: str) -> str:
    """Name of the unexported dispatch adapter bound into the service descriptor."""
    return unexport(method)


def full_method_name(service_full_name: str, method: str) -> str:
    """Fully-qualified method path, e.g. ``/helloworld.Greeter/SayHello``."""
    return f"/{service_full_name}/{method}"
