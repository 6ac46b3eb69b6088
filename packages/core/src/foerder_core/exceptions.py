"""Custom exceptions for the Foerder application engine.

This module provides a hierarchy of exception classes for consistent error
handling across the engine. All exceptions inherit from FoerderError, making
it easy to catch all application-specific errors.

Expected data states (a missing field, a malformed amount, an inconsistent
total) are never raised. They are reported as ``FieldError`` values by the
validators. The exceptions here cover programming errors and the few
boundaries where a caller has to decide what to do.

Example:
    try:
        cents = money.parse_strict(text)
    except AmountFormatError as e:
        if e.recoverable:
            # Ask the user to correct the input
            ...
    except FoerderError as e:
        logger.error("engine_failed", error=str(e))
"""

from typing import Any, Optional


class FoerderError(Exception):
    """Base exception for all Foerder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the error is potentially recoverable.

    Example:
        >>> raise FoerderError("Something went wrong", details={"step": 2})
        FoerderError: Something went wrong
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        """Initialize FoerderError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional context about the error.
            recoverable: Whether the error can be fixed by correcting input.
                Defaults to False.
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


class AmountFormatError(FoerderError):
    """Raised by the strict money parser for present but unparsable text.

    Attributes:
        value: The raw text that could not be parsed.

    Example:
        >>> raise AmountFormatError("Cannot parse amount", value="12,3,4")
        AmountFormatError: Cannot parse amount
    """

    def __init__(
        self,
        message: str,
        *,
        value: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.value = value
        if value is not None:
            self.details["value"] = value


class RecordPathError(FoerderError):
    """Raised when a field path does not exist in an application record.

    This is a programming error: rule tables and change requests must only
    name paths that exist in the record model.

    Attributes:
        path: The dotted path that failed to resolve.
        segment: The path segment at which resolution failed.
    """

    def __init__(
        self,
        message: str,
        *,
        path: Optional[str] = None,
        segment: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.path = path
        self.segment = segment

        if path:
            self.details["path"] = path
        if segment:
            self.details["segment"] = segment


class RuleDefinitionError(FoerderError):
    """Raised when a rule table is inconsistent.

    Examples are two sections sharing an id or a periodicity lookup for a
    category that has no policy.

    Attributes:
        rule: Identifier of the offending rule, section or category.
    """

    def __init__(
        self,
        message: str,
        *,
        rule: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.rule = rule
        if rule:
            self.details["rule"] = rule


class OperationNotAllowedError(FoerderError):
    """Raised for structurally forbidden record operations.

    Example:
        >>> raise OperationNotAllowedError(
        ...     "The main applicant cannot be removed",
        ...     operation="remove_applicant",
        ... )
        OperationNotAllowedError: The main applicant cannot be removed
    """

    def __init__(
        self,
        message: str,
        *,
        operation: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.operation = operation
        if operation:
            self.details["operation"] = operation


class RosterError(FoerderError):
    """Raised when the known-persons roster cannot be read or is corrupt.

    The duplicate detector always catches this error, logs it and continues
    as if no duplicate was found.

    Attributes:
        provider: Name of the roster provider that failed.
    """

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.provider = provider
        if provider:
            self.details["provider"] = provider


class ConfigurationError(FoerderError):
    """Error raised when configuration is invalid or missing.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
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
    "FoerderError",
    "AmountFormatError",
    "RecordPathError",
    "RuleDefinitionError",
    "OperationNotAllowedError",
    "RosterError",
    "ConfigurationError",
]
