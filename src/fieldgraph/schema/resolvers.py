from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Protocol, runtime_checkable

if TYPE_CHECKING:  # pragma: no cover
    from ..execution.context import ResolveContext


@runtime_checkable
class Resolver(Protocol):
    """Computes the value of a single field."""

    def resolve(self, context: "ResolveContext", arguments: Dict[str, Any]) -> Any: ...


class FunctionResolver:
    """Adapt a plain callable ``func(context, **arguments)`` to :class:`Resolver`."""

    def __init__(self, func: Callable[..., Any]):
        self.func = func

    def resolve(self, context: "ResolveContext", arguments: Dict[str, Any]) -> Any:
        return self.func(context, **arguments)

    def __repr__(self) -> str:
        name = getattr(self.func, "__qualname__", repr(self.func))
        return f"FunctionResolver({name})"


class ConstantResolver:
    def __init__(self, value: Any):
        self.value = value

    def resolve(self, context: "ResolveContext", arguments: Dict[str, Any]) -> Any:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantResolver({self.value!r})"


__all__ = ["Resolver", "FunctionResolver", "ConstantResolver"]
