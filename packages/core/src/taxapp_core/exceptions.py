"""Custom exceptions for the tax calculation core.

This module provides a hierarchy of exception classes for consistent error
handling across the registry, calculator and advisor. All exceptions inherit
from TaxCoreError, making it easy to catch all core-specific errors.

Example:
    try:
        calculation = calculator.compute(tax_return)
    except StoreUnavailableError as e:
        if e.recoverable:
            # Caller decides whether to back off and retry
            schedule_retry(tax_return)
        else:
            raise
    except ConfigurationMissingError:
        # Requires an administrative fix, never retried
        raise
"""

from typing import Any, Optional


class TaxCoreError(Exception):
    """Base exception for all tax core errors.

    ``details`` holds structured context in the shape structlog expects, and
    ``recoverable`` tells the caller whether repeating the same operation
    can succeed. ``str(error)`` is the message.

    Example:
        >>> error = TaxCoreError("Something went wrong", details={"tax_year": 2024})
        >>> error
        TaxCoreError('Something went wrong', tax_year=2024)
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: dict[str, Any] = dict(details or {})
        self.recoverable = recoverable

    def log_context(self) -> dict[str, Any]:
        """Keyword arguments for a structured log event about this error."""
        return {
            "error_type": type(self).__name__,
            "recoverable": self.recoverable,
            **self.details,
        }

    def __repr__(self) -> str:
        args = [repr(self.message)]
        args.extend(f"{key}={value!r}" for key, value in self.details.items())
        return f"{type(self).__name__}({', '.join(args)})"


class ConfigurationMissingError(TaxCoreError):
    """Raised when no tax law configuration exists for a tax year.

    This is fatal to the calculation and must reach the caller unchanged.
    It requires an administrative fix (seeding or upserting the year), so
    it is never recoverable by retrying.

    Attributes:
        tax_year: The tax year that has no configuration.

    Example:
        >>> raise ConfigurationMissingError(
        ...     "Tax law configuration not found for year 2019",
        ...     tax_year=2019,
        ... )
        ConfigurationMissingError: Tax law configuration not found for year 2019
    """

    def __init__(
        self,
        message: str,
        *,
        tax_year: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        """Initialize ConfigurationMissingError.

        Args:
            message: Human-readable error description.
            tax_year: The tax year that was requested.
            details: Optional dictionary with additional context.
        """
        super().__init__(message, details=details, recoverable=False)
        self.tax_year = tax_year

        if tax_year is not None:
            self.details["tax_year"] = tax_year


class StoreUnavailableError(TaxCoreError):
    """Raised when the external configuration store cannot be reached.

    Distinct from ConfigurationMissingError: the year may well exist, but
    the fetch failed. Plausibly transient, so it is marked recoverable.
    The core itself never retries; that is the caller's decision.

    Attributes:
        tax_year: The tax year being fetched or saved.
        store_error: The underlying store error message.

    Example:
        >>> raise StoreUnavailableError(
        ...     "Configuration store unavailable",
        ...     tax_year=2024,
        ...     store_error="connection refused",
        ... )
        StoreUnavailableError: Configuration store unavailable
    """

    def __init__(
        self,
        message: str,
        *,
        tax_year: Optional[int] = None,
        store_error: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize StoreUnavailableError.

        Args:
            message: Human-readable error description.
            tax_year: The tax year involved in the failed store operation.
            store_error: The underlying error message from the store.
            details: Optional dictionary with additional context.
            recoverable: Whether the operation can be retried. Defaults to True.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.tax_year = tax_year
        self.store_error = store_error

        if tax_year is not None:
            self.details["tax_year"] = tax_year
        if store_error:
            self.details["store_error"] = store_error


class InvalidConfigurationError(TaxCoreError):
    """Raised when a tax law configuration cannot be accepted.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).

    Example:
        >>> raise InvalidConfigurationError(
        ...     "Tax year must be set before upsert",
        ...     config_key="tax_year",
        ...     expected="positive integer year",
        ...     actual=0,
        ... )
        InvalidConfigurationError: Tax year must be set before upsert
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
        """Initialize InvalidConfigurationError.

        Args:
            message: Human-readable error description.
            config_key: The name of the configuration key that is problematic.
            expected: Description of what value was expected.
            actual: The actual value found.
            details: Optional dictionary with additional context.
            recoverable: Whether the error can be fixed at runtime.
                Defaults to False.
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
    "TaxCoreError",
    "ConfigurationMissingError",
    "StoreUnavailableError",
    "InvalidConfigurationError",
]
