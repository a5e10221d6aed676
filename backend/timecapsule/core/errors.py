"""Error Hierarchy — typed, categorized exceptions for every capsule failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Lifecycle rejections are 4xx and stable per reason; infrastructure errors are 5xx
    - to_response() produces the REST envelope used by the global handlers
    - No internal details leaked in user-facing messages
    - CapsuleNotFoundError never says whether the capsule exists for another owner

Design Decisions:
    - Single hierarchy with TimeCapsuleError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    GONE = "gone"
    DATABASE = "database"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    capsule_id: str | None = None
    owner_id: str | None = None
    unlock_at: datetime | None = None
    debug_info: dict[str, Any] | None = None


class TimeCapsuleError(Exception):
    """Base exception for all TimeCapsule errors."""

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
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
            }
        }


# ─── Lifecycle Rejections (400-level) ───────────────────────────

class CapsuleValidationError(TimeCapsuleError):
    """Request payload is malformed or violates a field rule."""
    def __init__(self, message: str, field: str, context: ErrorContext | None = None):
        super().__init__(
            message, "VALIDATION_ERROR", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["field"] = self.field
        return response


class UnlockCodeRequiredError(TimeCapsuleError):
    """Operation needs an unlock code and none was supplied."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Unlock code is required",
            "UNLOCK_CODE_REQUIRED", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class InvalidUnlockCodeError(TimeCapsuleError):
    """Supplied unlock code does not match. Says nothing about why."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Invalid unlock code",
            "INVALID_UNLOCK_CODE", ErrorCategory.AUTHORIZATION,
            ErrorSeverity.WARNING, context, 401,
        )


class CapsuleNotYetUnlockedError(TimeCapsuleError):
    """Read attempted before unlock_at. Discloses unlock_at for retry."""
    def __init__(self, unlock_at: datetime, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.unlock_at = unlock_at
        super().__init__(
            "Capsule is not yet unlocked",
            "CAPSULE_NOT_YET_UNLOCKED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.INFO, ctx, 403,
        )
        self.unlock_at = unlock_at

    def to_response(self) -> dict:
        response = super().to_response()
        response["error"]["unlock_at"] = self.unlock_at.isoformat()
        return response


class CapsuleAlreadyUnlockedError(TimeCapsuleError):
    """Update/delete attempted after unlock_at; content is now immutable."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot {operation} an unlocked capsule",
            "CAPSULE_ALREADY_UNLOCKED", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, context, 403,
        )
        self.operation = operation


class CapsuleNotFoundError(TimeCapsuleError):
    """No capsule with this id is owned by the caller."""
    def __init__(self, capsule_id: str, context: ErrorContext | None = None):
        super().__init__(
            f"Capsule '{capsule_id}' not found",
            "CAPSULE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )


class CapsuleRetiredError(TimeCapsuleError):
    """Retention window elapsed — content permanently inaccessible."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Capsule has expired",
            "CAPSULE_RETIRED", ErrorCategory.GONE,
            ErrorSeverity.ERROR, context, 410,
        )


class AuthenticationError(TimeCapsuleError):
    """Bearer credential missing or failed verification."""
    def __init__(self, message: str = "Invalid or missing bearer token",
                 context: ErrorContext | None = None):
        super().__init__(
            message, "AUTHENTICATION_FAILED", ErrorCategory.AUTHENTICATION,
            ErrorSeverity.WARNING, context, 401,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseError(TimeCapsuleError):
    """Database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Database {operation} failed: {message}",
            "DATABASE_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.operation = operation
