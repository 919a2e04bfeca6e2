"""Error Hierarchy — typed, categorized exceptions for all bridge failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Remote status code and body are carried in ErrorContext when known
    - to_response() produces the REST envelope returned by the route layer
    - Session expiry and transient failures are resolved inside the core when possible

Design Decisions:
    - Single hierarchy with BridgeError base: FastAPI global handler catches all
    - ErrorContext as dataclass: observability fields without coupling to logging
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
    AUTHENTICATION = "authentication"
    SESSION = "session"
    EXTERNAL_API = "external_api"
    CLIENT_ERROR = "client_error"
    AGGREGATION = "aggregation"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    operation: str | None = None
    path: str | None = None
    status_code: int | None = None
    remote_body: Any = None
    attempts: int | None = None


class BridgeError(Exception):
    """Base exception for all bridge errors."""

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

    @property
    def status_code(self) -> int | None:
        return self.context.status_code

    @property
    def remote_body(self) -> Any:
        return self.context.remote_body

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "operation": self.context.operation,
                    "path": self.context.path,
                    "status_code": self.context.status_code,
                    "attempts": self.context.attempts,
                },
                "detail": self.context.remote_body,
            }
        }


def _with_status(
    context: ErrorContext | None, status_code: int | None, body: Any,
) -> ErrorContext:
    ctx = context or ErrorContext()
    if status_code is not None:
        ctx.status_code = status_code
    if body is not None:
        ctx.remote_body = body
    return ctx


# ─── Session Errors ─────────────────────────────────────────────

class AuthenticationFailure(BridgeError):
    """Login rejected by the remote service. Fatal at boot, surfaced otherwise."""
    def __init__(
        self,
        status_code: int | None,
        body: Any = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Login failed: HTTP {status_code}",
            "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.CRITICAL, _with_status(context, status_code, body), 502,
        )


class SessionExpired(BridgeError):
    """Remote redirected to login — the session cookie was rejected."""
    def __init__(
        self,
        path: str,
        status_code: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = _with_status(context, status_code, None)
        ctx.path = path
        super().__init__(
            f"Session rejected by remote on {path}",
            "SESSION_EXPIRED", ErrorCategory.SESSION,
            ErrorSeverity.WARNING, ctx, 502,
        )


# ─── Remote Call Errors ─────────────────────────────────────────

class TransientFailure(BridgeError):
    """Network or server-side failure that survived the retry budget."""
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "TRANSIENT_FAILURE", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, _with_status(context, status_code, body), 503,
        )


class NonRetryableClientError(BridgeError):
    """Remote answered with a 4xx that no retry will fix."""
    def __init__(
        self,
        status_code: int,
        body: Any = None,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Remote rejected request: HTTP {status_code}",
            "REMOTE_CLIENT_ERROR", ErrorCategory.CLIENT_ERROR,
            ErrorSeverity.ERROR, _with_status(context, status_code, body),
            status_code if 400 <= status_code < 500 else 502,
        )


class PartialAggregationFailure(BridgeError):
    """One space failed during all-pages fan-out. Logged and skipped, never raised."""
    def __init__(
        self,
        space_id: str,
        space_name: str,
        cause: Exception,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Error fetching pages for space {space_name}: {cause}",
            "PARTIAL_AGGREGATION_FAILURE", ErrorCategory.AGGREGATION,
            ErrorSeverity.WARNING, context, 500,
        )
        self.space_id = space_id
        self.space_name = space_name
        self.cause = cause
