"""
Error classification for photomap.

Every failure the application can report is a PhotoMapError carrying a
stable code and a short user-facing message. Errors log themselves when
they are created; the application shell turns them into messages and
never lets them escape to the host.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from .logging_config import get_logger, log_error

logger = get_logger(__name__)


class ErrorCategory(Enum):
    """Error categories for classification and handling."""

    RESOLUTION = "resolution"
    EXPORT = "export"
    PERMISSION = "permission"
    DECODE = "decode"
    SYSTEM = "system"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


@dataclass
class ErrorInfo:
    """Structured error information."""

    category: ErrorCategory
    severity: ErrorSeverity
    code: str
    message: str
    user_message: str
    details: dict[str, Any]
    timestamp: datetime

    def to_dict(self) -> dict[str, Any]:
        """Convert error info to dictionary."""
        return {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            "message": self.message,
            "user_message": self.user_message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }


class PhotoMapError(Exception):
    """Base exception class for photomap."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(message)
        self.category = category
        self.severity = severity
        self.code = code or f"{category.value}_error"
        self.user_message = user_message or self._generate_user_message()
        self.details = details or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now()

        self._log_error()

    def _generate_user_message(self) -> str:
        user_messages = {
            ErrorCategory.RESOLUTION: "Unable to read photo information.",
            ErrorCategory.EXPORT: "Failed to save the image.",
            ErrorCategory.PERMISSION: "Storage permission is required.",
            ErrorCategory.DECODE: "The image data could not be decoded.",
            ErrorCategory.SYSTEM: "A system error occurred.",
            ErrorCategory.UNKNOWN: "An unexpected error occurred.",
        }
        return user_messages.get(self.category, "An error occurred.")

    def _log_error(self) -> None:
        error_context = {
            "category": self.category.value,
            "severity": self.severity.value,
            "code": self.code,
            **self.details,
        }

        if self.original_exception:
            error_context["original_exception"] = str(self.original_exception)

        log_error(self, error_context)

    def get_error_info(self) -> ErrorInfo:
        """Get structured error information."""
        return ErrorInfo(
            category=self.category,
            severity=self.severity,
            code=self.code,
            message=str(self),
            user_message=self.user_message,
            details=self.details,
            timestamp=self.timestamp,
        )


class ResolutionError(PhotoMapError):
    """Raised when no read strategy could open an image reference."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.RESOLUTION,
            severity=ErrorSeverity.MEDIUM,
            code=code or "unreadable",
            user_message=user_message
            or "Unable to read photo information.\nMake sure the photo is not encrypted or damaged.",
            details=details,
            original_exception=original_exception,
        )


class ExportError(PhotoMapError):
    """Base class for gallery export failures."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.EXPORT,
        code: str | None = None,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=category,
            severity=ErrorSeverity.MEDIUM,
            code=code or "export_failed",
            user_message=user_message,
            details=details,
            original_exception=original_exception,
        )


class PermissionDeniedError(ExportError):
    """Storage permission for the active permission model is missing."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.PERMISSION,
            code="permission_denied",
            user_message=user_message or "Storage permission is required to save images.",
            details=details,
        )


class DecodeFailedError(ExportError):
    """Payload is not base64 or does not decode to a raster image."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        details: dict[str, Any] | None = None,
        original_exception: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category=ErrorCategory.DECODE,
            code="decode_failed",
            user_message=user_message or f"Save failed: {message}",
            details=details,
            original_exception=original_exception,
        )


def handle_error(error: Exception, context: dict[str, Any] | None = None) -> ErrorInfo:
    """
    Turn any exception into structured error information.

    PhotoMapErrors report themselves; anything else is wrapped as a
    system or unknown error.
    """
    if isinstance(error, PhotoMapError):
        return error.get_error_info()

    error_type = type(error).__name__
    category = ErrorCategory.SYSTEM if isinstance(error, OSError) else ErrorCategory.UNKNOWN
    wrapped = PhotoMapError(
        message=str(error),
        category=category,
        details={"original_type": error_type, **(context or {})},
        original_exception=error,
    )
    return wrapped.get_error_info()
