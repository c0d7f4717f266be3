"""Error Hierarchy — typed, categorized exceptions for all Posts API failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) never reach the store; infrastructure errors are 500-level
    - to_response() produces the REST envelope {"error": <status phrase>, "description": <detail>}
    - No internal details leaked in user-facing messages

Design Decisions:
    - Single hierarchy with PostsApiError base: FastAPI global handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
    - NotFound and StorageError are distinct types: absence is a 404, an unreachable store is a 503
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from http import HTTPStatus


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    INVALID_ARGUMENT = "invalid_argument"
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    STORAGE = "storage"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    post_id: str | None = None
    operation: str | None = None


def status_phrase(http_status: int) -> str:
    """HTTP reason phrase for a status code ("Not Found", "Bad Request", ...)."""
    try:
        return HTTPStatus(http_status).phrase
    except ValueError:
        return "Error"


def error_body(http_status: int, description: str) -> dict:
    """The one error envelope every non-2xx JSON response uses."""
    return {"error": status_phrase(http_status), "description": description}


class PostsApiError(Exception):
    """Base exception for all Posts API errors."""

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
        return error_body(self.http_status, self.message)


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(PostsApiError):
    """Malformed input shape (bad pagination window, missing id)."""
    def __init__(self, message: str, argument: str, context: ErrorContext | None = None):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.INVALID_ARGUMENT,
            ErrorSeverity.WARNING, context, 400,
        )
        self.argument = argument


@dataclass(frozen=True)
class FieldViolation:
    """One failed field rule, e.g. FieldViolation("title", "min_length")."""
    field: str
    rule: str

    def describe(self) -> str:
        return f"Field '{self.field}' failed validation: {self.rule}"


class PostValidationError(PostsApiError):
    """Post fields failed one or more rules. Raised before any store call."""
    def __init__(
        self, violations: list[FieldViolation], context: ErrorContext | None = None,
    ):
        details = "; ".join(v.describe() for v in violations)
        super().__init__(
            f"validation failed: {details}",
            "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.violations = list(violations)


class ResourceNotFoundError(PostsApiError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} with ID {resource_id} not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.INFO, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageError(PostsApiError):
    """Store call failed for a reason other than absence (retryable)."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Storage {operation} failed: {message}",
            "STORAGE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation

    def to_response(self) -> dict:
        # driver text stays in the logs
        return error_body(self.http_status, "The storage backend is unavailable. Please retry.")
