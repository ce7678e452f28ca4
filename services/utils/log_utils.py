#!/usr/bin/env python3
"""
Logging Utilities

This module provides standardized logging setup and helper functions.
"""

import os
import sys
import logging
import time
import uuid
from typing import Optional
from flask import Request, Response, g, request
import structlog
from structlog.contextvars import bind_contextvars, clear_contextvars

# --- structlog configuration ---

# Processors define how log records are enriched and formatted
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level, # Adds log level (e.g., 'info')
        structlog.stdlib.add_logger_name, # Adds logger name
        structlog.processors.TimeStamper(fmt="iso"), # Adds ISO timestamp
        structlog.processors.StackInfoRenderer(), # Adds stack info on exception
        structlog.dev.set_exc_info, # Adds exception info automatically
        structlog.processors.dict_tracebacks, # Formats tracebacks nicely
        structlog.processors.UnicodeDecoder(), # Decodes unicode strings
        # Add context variables (like request_id) if set via structlog.contextvars
        structlog.contextvars.merge_contextvars,
        # Final step: Render the event dictionary to JSON
        structlog.processors.JSONRenderer()
    ],
    # Use standard logging infrastructure for output
    wrapper_class=structlog.stdlib.BoundLogger,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

# Headers that may identify a client; never logged verbatim
REDACTED_HEADERS = {"authorization", "cookie", "x-forwarded-for", "x-real-ip"}

# --- Standard logging setup (for handlers) ---

def setup_standard_logging(log_file: Optional[str] = None, level: int = logging.INFO):
    """
    Sets up standard logging handlers (Console, File).
    structlog will use these handlers for output.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Clear existing handlers (important for reconfiguration)
    root_logger.handlers.clear()

    # structlog renders the JSON, so the handler needs no formatter
    console_handler = logging.StreamHandler(sys.stdout)
    root_logger.addHandler(console_handler)

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        root_logger.addHandler(logging.FileHandler(log_file))


def initialize_logging(log_level_name: str = 'INFO', log_file: Optional[str] = None):
    """
    Call this once at application startup to configure logging handlers.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)
    setup_standard_logging(log_file=log_file, level=log_level)
    structlog.get_logger(__name__).info("Logging initialized", log_level=log_level_name, log_file=log_file or 'console')


# --- Request/Response Logging ---

def safe_headers(headers) -> dict:
    """Copy request headers with client-identifying values redacted."""
    return {
        name: ("<redacted>" if name.lower() in REDACTED_HEADERS else value)
        for name, value in headers.items()
    }


def log_request(req: Request) -> None:
    """
    Log details about an HTTP request using structlog.
    Assumes structlog contextvars are used for request_id.
    """
    logger = structlog.get_logger('request_logger')

    # Store request start time for calculating duration
    g.request_start_time = time.time()

    logger.info("request_received",
                method=req.method,
                path=req.path,
                args=dict(req.args),
                headers=safe_headers(req.headers))


def log_response(response: Response) -> None:
    """
    Log details about an HTTP response using structlog.
    """
    logger = structlog.get_logger('request_logger')

    duration_ms = None
    if hasattr(g, 'request_start_time'):
        duration_ms = round((time.time() - g.request_start_time) * 1000, 2)

    logger.info("response_sent",
                status_code=response.status_code,
                duration_ms=duration_ms,
                content_length=response.content_length)


# --- Flask Request Hook Setup ---

def setup_request_logging(app):
    """
    Set up Flask before/after request hooks for logging.
    Binds a request_id context variable for the lifetime of each request.
    """

    @app.before_request
    def before_request_log():
        clear_contextvars()
        request_id = str(uuid.uuid4())
        g.request_id = request_id
        bind_contextvars(request_id=request_id)

        log_request(request)

    @app.after_request
    def after_request_log(response):
        log_response(response)
        response.headers["X-Request-ID"] = g.get("request_id", "")
        return response

    @app.teardown_request
    def teardown_request_log(exc=None):
        clear_contextvars()
