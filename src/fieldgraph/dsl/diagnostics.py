from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

REQUEST_PARSE_ERROR = "REQUEST_PARSE_ERROR"
FIELD_NOT_FOUND = "FIELD_NOT_FOUND"
FIELD_CONFLICT = "FIELD_CONFLICT"
SELECTION_INVALID = "SELECTION_INVALID"
ARGUMENT_MISSING = "ARGUMENT_MISSING"
ARGUMENT_INVALID = "ARGUMENT_INVALID"
ARGUMENT_UNKNOWN = "ARGUMENT_UNKNOWN"
RESOLVER_ERROR = "RESOLVER_ERROR"
NULL_VALUE = "NULL_VALUE"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class Diagnostic:
    code: str
    message: str
    path: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "path": self.path, "code": self.code}


@dataclass
class Diagnostics:
    messages: List[Diagnostic] = field(default_factory=list)

    def add(self, code: str, message: str, path: str, severity: Severity = Severity.ERROR) -> None:
        self.messages.append(Diagnostic(code=code, message=message, path=path, severity=severity))

    def extend(self, other: "Diagnostics") -> None:
        self.messages.extend(other.messages)

    def has_errors(self) -> bool:
        return any(msg.severity == Severity.ERROR for msg in self.messages)

    def errors(self) -> List[Diagnostic]:
        return [msg for msg in self.messages if msg.severity == Severity.ERROR]

    def with_code(self, code: str) -> List[Diagnostic]:
        return [msg for msg in self.messages if msg.code == code]

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)
