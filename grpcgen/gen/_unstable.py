"""Unstable-interface builder.

``Unstable<Service>Service`` lists every method with its full handler
signature.  Adding a method to the service adds one to this interface, so
implementing it directly breaks on regeneration; it exists so callers can
see which signatures ``New<Service>Service`` checks for.  Emitted in every
generation mode.
"""

from __future__ import annotations

from grpcgen.gen._common import method_signature
from grpcgen.gen._nodes import ArtifactKind, Decl, Member
from grpcgen.model import Service
from grpcgen.naming import unstable_service_name

__all__ = ["build_unstable_interface"]


def build_unstable_interface(service: Service) -> Decl:
    """Build ``Unstable<Service>Service`` for ``service``."""
    name = unstable_service_name(service.go_name)
    members = tuple(
        Member(
            name=method.go_name,
            signature=method_signature(method),
            method=method.go_name,
            comments=method.leading_comments,
            deprecated=method.deprecated,
            annotation=f"{name}.{method.go_name}",
            location=method.location,
        )
        for method in service.methods
    )
    return Decl(
        kind=ArtifactKind.UNSTABLE_INTERFACE,
        name=name,
        header=("type ", name, " interface {"),
        doc=(
            f"{name} is the service API for {service.go_name} service.",
            "New methods may be added to this interface if they are added to the service",
            "definition, which is not a backward-compatible change.  For this reason,",
            "use of this type is not recommended.",
        ),
        deprecated=service.deprecated,
        members=members,
        annotation=name,
        location=service.location,
    )
