from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..dsl.diagnostics import Diagnostic, Diagnostics


@dataclass
class ExecutionResult:
    """Resolved data plus every error collected while producing it.

    ``data`` is empty only when the request could not be parsed; otherwise
    it holds whatever resolved, even if some fields failed.
    """

    data: Dict[str, Any]
    errors: Diagnostics = field(default_factory=Diagnostics)

    @property
    def ok(self) -> bool:
        return not self.errors.has_errors()

    @property
    def partial(self) -> bool:
        return bool(self.data) and self.errors.has_errors()

    def error_list(self) -> List[Diagnostic]:
        return self.errors.errors()

    def error_messages(self) -> List[str]:
        return [msg.message for msg in self.errors.errors()]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"data": self.data}
        if self.errors.messages:
            out["errors"] = [msg.to_dict() for msg in self.errors.messages]
        return out


__all__ = ["ExecutionResult"]
