from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Tuple


class MissingServiceError(LookupError):
    """Raised when a resolver asks for a collaborator that was not injected."""


@dataclass(frozen=True)
class ExecutionContext:
    """Handles to external collaborators, built once by the caller.

    Resolvers reach data stores only through the services registered here.
    """

    services: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "services", MappingProxyType(dict(self.services)))

    def service(self, name: str) -> Any:
        try:
            return self.services[name]
        except KeyError:
            raise MissingServiceError(f"Service {name!r} is not available in the execution context") from None

    def has_service(self, name: str) -> bool:
        return name in self.services


@dataclass(frozen=True)
class ResolveContext:
    """Per-field view handed to a resolver."""

    execution: ExecutionContext
    source: Any
    field_name: str
    type_name: str
    path: Tuple[Any, ...] = ()

    def service(self, name: str) -> Any:
        return self.execution.service(name)


__all__ = ["ExecutionContext", "ResolveContext", "MissingServiceError"]
