from .context import ExecutionContext, MissingServiceError, ResolveContext
from .result import ExecutionResult
from .arguments import bind_arguments
from .engine import Executor, execute, format_path

__all__ = [
    "ExecutionContext",
    "ResolveContext",
    "MissingServiceError",
    "ExecutionResult",
    "bind_arguments",
    "Executor",
    "execute",
    "format_path",
]
