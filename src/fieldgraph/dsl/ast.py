from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class Variable:
    """Reference to a caller-supplied variable (``$name``)."""

    name: str


@dataclass(frozen=True)
class EnumValue:
    """Bare-word literal such as ``ACTIVE``; no scalar argument accepts one."""

    name: str


_NO_DEFAULT: Any = object()


@dataclass(frozen=True)
class VariableDefinition:
    name: str
    type: str
    default: Any = _NO_DEFAULT

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT


@dataclass
class Selection:
    name: str
    alias: Optional[str] = None
    arguments: Dict[str, Any] = field(default_factory=dict)
    selections: List["Selection"] = field(default_factory=list)
    line: int = 0
    column: int = 0

    @property
    def response_key(self) -> str:
        return self.alias or self.name


@dataclass
class Request:
    selections: List[Selection]
    operation: str = "query"
    name: Optional[str] = None
    variable_definitions: List[VariableDefinition] = field(default_factory=list)

    def variable_defaults(self) -> Dict[str, Any]:
        return {d.name: d.default for d in self.variable_definitions if d.has_default}
