"""Custom exceptions for the Cash Flow Foundation packages.

This module provides a hierarchy of exception classes for consistent error
handling across the allocation core and the session layer. All exceptions
inherit from CashflowError, making it easy to catch every application error.

Numeric input never raises: money and percent text degrade to zero or a
clamped value. The exceptions below cover malformed structural values
(month tokens, step keys), unknown needs, and collaborator failures.

Example:
    try:
        await session.sign_in(email, password)
    except AuthenticationError as e:
        show_message(e.message)
    except CashflowError as e:
        logger.error("session_failed", error=str(e))
"""

from typing import Any, Optional


class CashflowError(Exception):
    """Base exception for all Cash Flow Foundation errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise CashflowError("Something went wrong", details={"code": 500})
        CashflowError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize CashflowError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error is potentially recoverable through
                retry or user correction. Defaults to False.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class ValidationError(CashflowError):
    """Error raised when a structural value fails validation.

    Raised for malformed month tokens and for completion step keys that do
    not belong to the tool they are recorded against.

    Attributes:
        field: The field that failed validation.
        value: The invalid value.
        constraint: The validation constraint that was violated.

    Example:
        >>> raise ValidationError(
        ...     "Invalid month token",
        ...     field="due_month",
        ...     value="2026-13",
        ...     constraint="YYYY-MM with month 01-12",
        ... )
        ValidationError: Invalid month token
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        constraint: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize ValidationError.

        Args:
            message: Human-readable error description.
            field: The name of the field that failed validation.
            value: The invalid value.
            constraint: Description of the validation rule violated.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed by user correction.
                Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.field = field
        self.value = value
        self.constraint = constraint

        if field:
            self.details["field"] = field
        if value is not None:
            self.details["value"] = value
        if constraint:
            self.details["constraint"] = constraint


class NeedNotFoundError(CashflowError):
    """Error raised when a need id does not exist in the ledger."""

    def __init__(
        self,
        need_id: str,
        *,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(
            f"No need with id {need_id!r}",
            details=details,
            recoverable=True,
        )
        self.need_id = need_id
        self.details["need_id"] = need_id


class AuthenticationError(CashflowError):
    """Error raised by the identity provider.

    The message is meant to be shown to the user verbatim; no recovery is
    attempted beyond letting the user try again.

    Attributes:
        operation: The identity operation that failed (sign_in, sign_up, ...).
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize AuthenticationError.

        Args:
            message: Human-readable error description.
            operation: The identity operation being attempted.
            details: Optional dictionary with additional context.
            recoverable: Whether the user can retry. Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.operation = operation

        if operation:
            self.details["operation"] = operation


class PersistenceError(CashflowError):
    """Error raised when the document store cannot read or write state.

    Attributes:
        user_id: The user whose document was being accessed.
        operation: Either "get" or "upsert".
    """

    def __init__(
        self,
        message: str,
        *,
        user_id: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize PersistenceError.

        Args:
            message: Human-readable error description.
            user_id: Identifier of the document owner.
            operation: The store operation being attempted.
            details: Optional dictionary with additional context.
            recoverable: Whether a later attempt may succeed. Defaults to True
                since the next edit re-attempts the save.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.user_id = user_id
        self.operation = operation

        if user_id:
            self.details["user_id"] = user_id
        if operation:
            self.details["operation"] = operation


class ConfigurationError(CashflowError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise ConfigurationError(
        ...     "Missing document store",
        ...     config_key="store",
        ...     expected="A DocumentStore implementation",
        ... )
        ConfigurationError: Missing document store
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize ConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found (avoid including secrets).
            details: Optional dictionary with additional context.
            recoverable: Defaults to False since configuration errors
                require a restart with corrected settings.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "CashflowError",
    "ValidationError",
    "NeedNotFoundError",
    "AuthenticationError",
    "PersistenceError",
    "ConfigurationError",
]
