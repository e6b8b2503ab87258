"""
Family Wallet Exception Hierarchy.

Defines all custom exceptions used across the Family Wallet system.
Fatal registry failures carry an ErrorKind so callers can branch on the
kind of failure instead of parsing the message.
"""

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Kinds of failure a registry caller can observe."""

    ALREADY_INITIALIZED = "already_initialized"
    NOT_INITIALIZED = "not_initialized"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"


class FamilyWalletError(Exception):
    """
    Base exception for all Family Wallet errors.

    Registry rejections set ``kind``; host-level failures such as storage
    or configuration problems leave it as None.
    """

    kind: ErrorKind | None = None

    def __init__(self, message: str, *, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        pairs = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({pairs})"

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error, kind included, for structured output."""
        return {
            "error_type": type(self).__name__,
            "kind": self.kind.value if self.kind else None,
            "message": self.message,
            "details": self.details,
        }


class RegistryError(FamilyWalletError):
    """
    Errors in wallet registry operations.

    Raised when a mutating operation is rejected, including:
    - Initialization state violations
    - Authorization failures
    - Invalid member input
    """

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        identity: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        """
        Initialize a RegistryError.

        Args:
            message: Human-readable error message
            operation: Registry operation being performed
            identity: Identity involved (caller or target)
            details: Optional structured data for debugging
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        if identity:
            details["identity"] = identity

        super().__init__(message, details=details)
        self.operation = operation
        self.identity = identity


class AlreadyInitializedError(RegistryError):
    """Raised when initialize is called on a registry that has an owner."""

    kind = ErrorKind.ALREADY_INITIALIZED

    def __init__(self, message: str = "Wallet already initialized", **kwargs):
        kwargs.setdefault("operation", "initialize")
        super().__init__(message, **kwargs)


class NotInitializedError(RegistryError):
    """Raised when a mutating operation runs before initialize."""

    kind = ErrorKind.NOT_INITIALIZED

    def __init__(self, message: str = "Wallet not initialized", **kwargs):
        super().__init__(message, **kwargs)


class UnauthorizedError(RegistryError):
    """
    Raised when a caller fails identity verification or is not the owner.

    Passing verification is not enough for owner-gated operations:
    the verified identity must also match the stored owner.
    """

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str = "Unauthorized", **kwargs):
        super().__init__(message, **kwargs)


class InvalidInputError(RegistryError):
    """Raised when member input fails validation."""

    kind = ErrorKind.INVALID_INPUT

    def __init__(
        self,
        message: str = "Invalid input",
        *,
        field: str | None = None,
        **kwargs,
    ):
        """
        Initialize an InvalidInputError.

        Args:
            message: Human-readable error message
            field: Field name that failed validation
            **kwargs: Additional arguments passed to RegistryError
        """
        details = kwargs.pop("details", {}) or {}
        if field:
            details["field"] = field
        kwargs["details"] = details

        super().__init__(message, **kwargs)
        self.field = field


class StorageError(FamilyWalletError):
    """Errors raised by a persistent instance store."""


class StateArchivedError(StorageError):
    """Raised when instance state is accessed after its lifetime lapsed."""

    def __init__(
        self,
        message: str = "Instance state has expired and is no longer accessible",
        *,
        expired_at: float | None = None,
    ):
        details = {}
        if expired_at is not None:
            details["expired_at"] = expired_at
        super().__init__(message, details=details)
        self.expired_at = expired_at


class ConfigurationError(FamilyWalletError):
    """
    Errors in configuration loading or validation.

    Raised when:
    - Required environment variables are malformed
    - Configuration values are out of range
    """

    def __init__(
        self,
        message: str,
        *,
        env_var: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if env_var:
            details["env_var"] = env_var

        super().__init__(message, details=details)
        self.env_var = env_var
