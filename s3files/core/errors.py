"""
Error Hierarchy for the S3 File Manager

Only errors raised by this layer live here. Failures reported by the
object store (access denied, throttling, network faults) are botocore
exceptions and reach the caller unchanged, so callers can branch on the
store's own error codes.

Each error type includes:
- Error code for programmatic handling
- Human-readable message for logging
- Optional context dictionary (never credentials or object bytes)

Usage:
    try:
        config = FileManagerConfig(region="", bucket_name="uploads")
    except ConfigurationError as exc:
        log.warning(exc.message, **exc.context)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from s3files.core.constants import NOT_FOUND_CODES


# =============================================================================
# ERROR CODE ENUMERATION
# =============================================================================
class ErrorCode(Enum):
    """
    Error codes for programmatic error handling.

    Codes are grouped by concern:
    - 1xxx: Configuration errors
    - 2xxx: Input errors
    - 3xxx: Client lifecycle errors
    """

    # Configuration errors (1xxx)
    CONFIG_MISSING_FIELD = 1001
    CONFIG_INVALID_VALUE = 1002

    # Input errors (2xxx)
    INPUT_MISSING_FIELD = 2001
    INVALID_ARGUMENT = 2002

    # Client lifecycle errors (3xxx)
    CLIENT_NOT_CONNECTED = 3001


# =============================================================================
# BASE ERROR CLASS
# =============================================================================
@dataclass
class FileManagerError(Exception):
    """
    Base class for errors raised by this layer.

    Store errors are deliberately not subclasses: they are re-raised as
    the original botocore exception.
    """

    code: ErrorCode
    message: str
    context: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize error to dictionary for logging/API responses."""
        return {
            "code": self.code.name,
            "code_value": self.code.value,
            "message": self.message,
            "context": self.context,
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"code={self.code.name}, "
            f"message={self.message!r})"
        )


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================
@dataclass
class ConfigurationError(FileManagerError):
    """
    Invalid client configuration.

    Raised synchronously at construction time, before any network activity.
    """

    @classmethod
    def missing_field(cls, name: str, description: str) -> ConfigurationError:
        """Required configuration value is absent or empty."""
        return cls(
            code=ErrorCode.CONFIG_MISSING_FIELD,
            message=f"{description} is required",
            context={"field": name},
        )

    @classmethod
    def invalid_value(cls, name: str, value: Any, reason: str) -> ConfigurationError:
        """Configuration value is present but unusable."""
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for {name}: {reason}",
            context={"field": name, "value": repr(value)},
        )


# =============================================================================
# INPUT ERRORS
# =============================================================================
@dataclass
class InvalidFileInputError(FileManagerError):
    """Caller-side file object is missing a field required for upload."""

    @classmethod
    def missing_field(cls, name: str, source: str) -> InvalidFileInputError:
        return cls(
            code=ErrorCode.INPUT_MISSING_FIELD,
            message=f"File object from {source} has no '{name}'",
            context={"field": name, "source": source},
        )


@dataclass
class InvalidArgumentError(FileManagerError):
    """Operation argument outside the range the store accepts."""

    @classmethod
    def out_of_range(
        cls,
        name: str,
        value: Any,
        low: int,
        high: int,
    ) -> InvalidArgumentError:
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"{name} must be between {low} and {high}, got {value}",
            context={"argument": name, "value": value},
        )

    @classmethod
    def invalid_choice(
        cls,
        name: str,
        value: Any,
        choices: tuple[str, ...],
    ) -> InvalidArgumentError:
        return cls(
            code=ErrorCode.INVALID_ARGUMENT,
            message=f"{name} must be one of {', '.join(choices)}, got {value!r}",
            context={"argument": name, "value": repr(value)},
        )


# =============================================================================
# LIFECYCLE ERRORS
# =============================================================================
@dataclass
class NotConnectedError(FileManagerError):
    """Operation attempted before connect() or after close()."""

    @classmethod
    def for_operation(cls, operation: str) -> NotConnectedError:
        return cls(
            code=ErrorCode.CLIENT_NOT_CONNECTED,
            message=f"Cannot {operation}: client is not connected",
            context={"operation": operation},
        )


# =============================================================================
# STORE ERROR CLASSIFICATION
# =============================================================================
def error_code_of(exc: BaseException) -> str | None:
    """
    Extract the store error code from a botocore ClientError.

    Returns None for anything that is not a ClientError-shaped exception.
    """
    response = getattr(exc, "response", None)
    if not isinstance(response, dict):
        return None
    code = response.get("Error", {}).get("Code")
    return str(code) if code is not None else None


def is_not_found(exc: BaseException) -> bool:
    """True when the store reported the object as absent."""
    return error_code_of(exc) in NOT_FOUND_CODES


__all__ = [
    "ErrorCode",
    "FileManagerError",
    "ConfigurationError",
    "InvalidFileInputError",
    "InvalidArgumentError",
    "NotConnectedError",
    "error_code_of",
    "is_not_found",
]
