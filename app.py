#!/usr/bin/env python3
"""
Timezone Date API Server

This Flask-based API server returns today's date for a caller's timezone,
records anonymized request analytics in Redis through a Celery worker, and
exposes the aggregated analytics as JSON.
"""

import os
from flask import Flask, jsonify, request
from flask_cors import CORS
import redis
import structlog
from werkzeug.exceptions import HTTPException, MethodNotAllowed, NotFound

# Import configuration first
from services.config import AppConfig

# Import logging utilities
from services.utils.log_utils import initialize_logging, setup_request_logging

# Import route blueprints
from services.api.analytics_routes import analytics_bp
from services.api.routes.date import date_bp
from services.api.routes.health import health_bp
from services.api.routes.root import root_bp

# Import error handling utilities
from services.utils.error_utils import (
    APIError,
    MethodNotAllowedError,
    NotFoundError,
    format_error_response
)

# Import Service Classes for Initialization
from services.analytics.analytics_service import AnalyticsService

# Initialize logger early for potential issues during import or setup
logger = structlog.get_logger(__name__)

def create_app(config_object=AppConfig):
    """Factory function to create and configure the Flask application."""
    app = Flask(__name__)

    # --- Load Configuration from Config Object --- #
    app.config.from_object(config_object)
    validate = getattr(config_object, 'validate', None)
    if callable(validate):
        validate()
    logger.info("Flask application configuration loaded.", config_env=app.config.get('FLASK_ENV', 'production'))

    # --- Initialize Structured Logging --- #
    initialize_logging(log_level_name=app.config.get('LOG_LEVEL', 'INFO'))
    setup_request_logging(app) # Set up before/after request hooks
    logger.info("Structured logging initialized.")

    # --- CORS Configuration --- #
    api_prefix = app.config.get('API_PREFIX', '/api')

    # Hooks run in reverse registration order, so this one runs after Flask-CORS
    @app.after_request
    def add_cors_method_headers(response):
        """Advertise allowed methods and headers on every API response, preflight or not."""
        if request.path.startswith(api_prefix + '/'):
            response.headers['Access-Control-Allow-Methods'] = 'GET, OPTIONS'
            response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        return response

    @app.before_request
    def reject_head_requests():
        """API endpoints answer GET and OPTIONS only; Flask would route HEAD to the GET view."""
        if request.method == 'HEAD' and request.path.startswith(api_prefix + '/'):
            raise MethodNotAllowed(valid_methods=['GET', 'OPTIONS'])

    CORS(app, resources={
        rf"{api_prefix}/*": {
            "origins": app.config.get('CORS_ORIGINS', '*'),
            "methods": ["GET", "OPTIONS"],
            "allow_headers": ["Content-Type"],
            "send_wildcard": True
        }
    })
    logger.info("CORS configured.", allowed_origins=app.config.get('CORS_ORIGINS', '*'))

    # --- Register Blueprints --- #
    app.register_blueprint(date_bp, url_prefix=api_prefix)
    app.register_blueprint(analytics_bp, url_prefix=api_prefix)
    app.register_blueprint(health_bp, url_prefix=api_prefix)
    app.register_blueprint(root_bp) # Root blueprint has no prefix
    logger.info("API blueprints registered.", api_prefix=api_prefix)

    # --- Service Initialization --- #

    # Initialize Redis client
    redis_url = app.config.get('REDIS_URL')
    app.redis_client = None
    if redis_url:
        try:
            app.redis_client = redis.from_url(redis_url, decode_responses=True)
            app.redis_client.ping() # Test connection
            logger.info("Redis client connected successfully.", redis_url=redis_url)
        except redis.exceptions.ConnectionError as e:
            logger.error("Failed to connect to Redis. Proceeding without Redis.", redis_url=redis_url, error=str(e))
            app.redis_client = None
        except redis.exceptions.RedisError as e:
            logger.error("Unexpected error initializing Redis.", redis_url=redis_url, error=str(e))
            app.redis_client = None
    else:
        logger.warning("REDIS_URL not configured. Redis client not initialized.")

    # Initialize Analytics Service
    app.analytics_service = AnalyticsService(config=app.config, redis_client=app.redis_client)
    logger.info("Analytics Service initialized.", tracking_enabled=app.config.get('DATE_TRACKING_ENABLED'))

    # --- Centralized Error Handling --- #
    error_logger = structlog.get_logger("error_handler")

    @app.errorhandler(APIError)
    def handle_api_error(error: APIError):
        """Handle custom APIErrors and return standardized JSON response."""
        log = error_logger.error if error.status_code >= 500 else error_logger.warning
        log("API Error occurred",
            error_message=error.message,
            status_code=error.status_code,
            details=error.details,
            exception_type=type(error).__name__,
            path=request.path,
            method=request.method)
        response_dict, status_code = format_error_response(error)
        return jsonify(response_dict), status_code

    @app.errorhandler(NotFound) # Handle 404 Not Found
    def handle_not_found(error: NotFound):
        """Handle Flask's default 404 and return JSON."""
        error_logger.info("Resource not found (404)", path=request.path, method=request.method)
        response_dict, status_code = format_error_response(NotFoundError())
        return jsonify(response_dict), status_code

    @app.errorhandler(MethodNotAllowed) # Handle 405 Method Not Allowed
    def handle_method_not_allowed(error: MethodNotAllowed):
        """Reject verbs other than GET/OPTIONS with a JSON 405."""
        error_logger.info("Method not allowed (405)", path=request.path, method=request.method)
        response_dict, status_code = format_error_response(MethodNotAllowedError())
        response = jsonify(response_dict)
        if error.valid_methods:
            response.headers["Allow"] = ", ".join(m for m in error.valid_methods if m != "HEAD")
        return response, status_code

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        """Render any other HTTP error as JSON with its own status code."""
        error_logger.info("HTTP error", status_code=error.code, path=request.path, method=request.method)
        return jsonify({"error": error.name, "message": error.description}), error.code

    @app.errorhandler(Exception) # Catch-all for other exceptions (500)
    def handle_generic_exception(error: Exception):
        """Handle unexpected exceptions and return a generic 500 error."""
        error_logger.error("Unhandled exception occurred",
                           error=str(error),
                           exception_type=type(error).__name__,
                           path=request.path,
                           method=request.method,
                           exc_info=True)
        response_dict, status_code = format_error_response(error)
        return jsonify(response_dict), status_code

    logger.info("Centralized error handlers registered.")

    return app

# Create the Flask app instance using the factory
app = create_app()

if __name__ == "__main__":
    host = app.config.get('HOST', '0.0.0.0')
    port = app.config.get('PORT', 5000)
    debug_mode = app.config.get('DEBUG', False)

    # Check if running with gunicorn (Gunicorn sets SERVER_SOFTWARE)
    is_gunicorn = "gunicorn" in os.environ.get("SERVER_SOFTWARE", "")

    if is_gunicorn:
        logger.info("Running with gunicorn workers.")
    else:
        logger.info("Starting Flask development server", host=host, port=port, debug=debug_mode)
        if not debug_mode:
             logger.warning("Running Flask development server in non-debug mode. Use Gunicorn for production.")
        app.run(host=host, port=port, debug=debug_mode)
