"""
Utilities Package

This package provides common utilities shared across services:
- Error handling
- Logging utilities
"""

from .error_utils import (
    APIError,
    ValidationError,
    InvalidTimezoneError,
    MethodNotAllowedError,
    NotFoundError,
    AnalyticsStoreError,
    format_error_response,
)
from .log_utils import initialize_logging, setup_request_logging

__all__ = [
    'APIError',
    'ValidationError',
    'InvalidTimezoneError',
    'MethodNotAllowedError',
    'NotFoundError',
    'AnalyticsStoreError',
    'format_error_response',
    'initialize_logging',
    'setup_request_logging',
]
