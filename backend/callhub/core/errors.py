"""Error Hierarchy - typed, categorized exceptions for every CallHub failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Parse/resolution errors are 400/404-level; load, invocation and database errors are 500-level
    - to_response() produces the flat REST envelope {"error": message, "code", "category"}
    - The dispatcher envelope only ever carries .message

Design Decisions:
    - Single hierarchy with CallHubError base: FastAPI global handler catches all
    - ResolutionError groups module-not-found, function-not-found and load failures
      so callers can catch the whole resolution stage at once
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOLUTION = "resolution"
    INVOCATION = "invocation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    call_string: str | None = None
    module_name: str | None = None
    function_name: str | None = None
    debug_info: dict[str, Any] | None = None


class CallHubError(Exception):
    """Base exception for all CallHub errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": self.message,
            "code": self.code,
            "category": self.category.value,
        }


# ─── Call Errors (400/404-level) ────────────────────────────────

class CallParseError(CallHubError):
    """Call text does not match module.function(args)."""
    def __init__(self, call_string: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.call_string = call_string
        super().__init__(
            f"Malformed call ({reason}): expected module.function(arg1, arg2, ...)",
            "MALFORMED_CALL", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, ctx, 400,
        )
        self.reason = reason


class ResolutionError(CallHubError):
    """Module or function could not be resolved to something callable."""


class HandlerModuleNotFoundError(ResolutionError):
    """No backing file exists for the requested module."""
    def __init__(self, module_name: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.module_name = module_name
        super().__init__(
            f"module {module_name} not found",
            "MODULE_NOT_FOUND", ErrorCategory.RESOLUTION,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.module_name = module_name


class HandlerFunctionNotFoundError(ResolutionError):
    """Module loaded but does not export the requested function."""
    def __init__(
        self, module_name: str, function_name: str, context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.module_name = module_name
        ctx.function_name = function_name
        super().__init__(
            f"function {function_name} not found in module {module_name}",
            "FUNCTION_NOT_FOUND", ErrorCategory.RESOLUTION,
            ErrorSeverity.WARNING, ctx, 404,
        )
        self.module_name = module_name
        self.function_name = function_name


class ModuleLoadError(ResolutionError):
    """Backing file exists but failed to compile or execute."""
    def __init__(self, module_name: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.module_name = module_name
        super().__init__(
            f"module {module_name} failed to load: {reason}",
            "MODULE_LOAD_FAILED", ErrorCategory.RESOLUTION,
            ErrorSeverity.ERROR, ctx, 500,
        )
        self.module_name = module_name
        self.reason = reason


class InvocationError(CallHubError):
    """Handler function raised while running."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "HANDLER_FAILED", ErrorCategory.INVOCATION,
            ErrorSeverity.ERROR, context, 500,
        )


class ResourceNotFoundError(CallHubError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class QueryForbiddenError(CallHubError):
    """Custom query is not a single read-only SELECT."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Only single read-only SELECT statements are allowed",
            "QUERY_FORBIDDEN", ErrorCategory.FORBIDDEN,
            ErrorSeverity.WARNING, context, 403,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class PersistenceError(CallHubError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
