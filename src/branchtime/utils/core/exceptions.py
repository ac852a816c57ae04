"""
Basic exception classes for branchtime.

This module contains the exception hierarchy shared by the configuration
layer and the time utilities, kept free of other package imports so it can
be used anywhere without creating import cycles.
"""

from __future__ import annotations

from enum import Enum


class ErrorSeverity(Enum):
    """Error severity levels for classification and handling."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling strategies."""

    CONFIGURATION = "configuration"
    CALENDAR = "calendar"
    PATTERN = "pattern"
    UNKNOWN = "unknown"


class BranchTimeError(Exception):
    """Base exception class for branchtime specific errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        user_message: str | None = None,
        context: object | None = None,
        recoverable: bool = True,
    ) -> None:
        super().__init__(message)
        self.category: ErrorCategory = category
        self.severity: ErrorSeverity = severity
        self.user_message: str = user_message or message
        self.context: object | None = context
        self.recoverable: bool = recoverable


class ConfigurationError(BranchTimeError):
    """Configuration-related errors."""

    def __init__(
        self,
        message: str,
        user_message: str | None = None,
        context: object | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            user_message=user_message,
            context=context,
        )


class InvalidComponentError(BranchTimeError):
    """
    A calendar component could not be set to the requested value.

    Raised when the resulting wall-clock date does not exist, for example
    day 30 in February or minute 75. The original timestamp is never touched.
    """

    def __init__(
        self,
        unit: str,
        value: int,
        user_message: str | None = None,
        context: object | None = None,
    ) -> None:
        super().__init__(
            f"Invalid value {value} for calendar component '{unit}'",
            category=ErrorCategory.CALENDAR,
            severity=ErrorSeverity.LOW,
            recoverable=True,
            user_message=user_message,
            context=context,
        )
        self.unit: str = unit
        self.value: int = value


class PatternError(BranchTimeError):
    """A date format pattern uses a field the formatting engine does not know."""

    def __init__(
        self,
        message: str,
        pattern: str,
        user_message: str | None = None,
    ) -> None:
        super().__init__(
            message,
            category=ErrorCategory.PATTERN,
            severity=ErrorSeverity.HIGH,
            recoverable=False,
            user_message=user_message,
            context=pattern,
        )
        self.pattern: str = pattern
