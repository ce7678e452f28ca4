#!/usr/bin/env python3
"""
Error Handling Utilities

This module provides standardized error handling and custom exception classes.
"""

from typing import Dict, Any, Optional, Tuple

EXAMPLE_TIMEZONES = ("Asia/Kolkata", "America/New_York", "Europe/London")

class APIError(Exception):
    """Base class for API-related errors."""

    error = "Internal Server Error"

    def __init__(self, message: str, status_code: int = 500, details: Any = None, error: Optional[str] = None):
        """
        Initialize API error.

        Args:
            message: Human readable error message
            status_code: HTTP status code
            details: Additional error details
            error: Short error title; defaults to the class-level title
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details
        if error:
            self.error = error

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        error_dict = {
            "error": self.error,
            "message": self.message
        }

        if self.details:
            error_dict["details"] = self.details

        return error_dict

class ValidationError(APIError):
    """Error for validation failures."""

    error = "Invalid request"

    def __init__(self, message: str, field: Optional[str] = None, details: Any = None):
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Name of the field that failed validation
            details: Additional error details
        """
        super().__init__(message, status_code=400, details=details)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        """Convert validation error to dictionary representation."""
        error_dict = super().to_dict()

        if self.field:
            error_dict["field"] = self.field

        return error_dict

class InvalidTimezoneError(ValidationError):
    """Raised when a timezone is not a recognized IANA identifier."""

    error = "Invalid timezone"

    def __init__(self, timezone: str):
        examples = ", ".join(f'"{name}"' for name in EXAMPLE_TIMEZONES)
        message = (
            f'The timezone "{timezone}" is not valid. '
            f"Please use a valid IANA timezone identifier (e.g., {examples})."
        )
        super().__init__(message)
        self.timezone = timezone

    def to_dict(self) -> Dict[str, Any]:
        error_dict = super().to_dict()
        error_dict["providedTimezone"] = self.timezone
        return error_dict

class MethodNotAllowedError(APIError):
    """Error for HTTP verbs an endpoint does not serve."""
    error = "Method not allowed"

    def __init__(self, message: str = "Only GET requests are supported"):
        super().__init__(message, status_code=405)

class NotFoundError(APIError):
    """Error when a requested resource is not found."""
    error = "Not Found"

    def __init__(self, message: str = "The requested URL was not found on the server.", details: Any = None):
        super().__init__(message, status_code=404, details=details)

class AnalyticsStoreError(APIError):
    """Error when the analytics store cannot be read."""
    error = "Failed to fetch analytics"

    def __init__(self, message: str = "Analytics data is temporarily unavailable.", details: Any = None):
        super().__init__(message, status_code=500, details=details)

def format_error_response(error: Exception) -> Tuple[Dict[str, Any], int]:
    """
    Format a standardized error response.

    Args:
        error: The exception to format

    Returns:
        Tuple of (error_dict, status_code)
    """
    if isinstance(error, APIError):
        return error.to_dict(), error.status_code

    # Generic error; internals never leak into the body
    error_dict = {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred on the server."
    }

    return error_dict, 500
