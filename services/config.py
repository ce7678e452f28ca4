"""
Centralized configuration management for the Timezone Date API.

Loads settings from environment variables with sensible defaults.
"""

import os
import multiprocessing
from dotenv import load_dotenv

# Load .env file if present (especially useful for local development)
load_dotenv()

def get_bool_env(var_name: str, default: bool = False) -> bool:
    """Helper to get boolean value from environment variable."""
    value = os.getenv(var_name, str(default)).lower()
    return value in ('true', '1', 'yes', 'on')

class AppConfig:
    """Application configuration class."""

    # --- Flask App Settings ---
    FLASK_ENV = os.getenv('FLASK_ENV', 'production')
    DEBUG = get_bool_env('FLASK_DEBUG', default=(FLASK_ENV == 'development'))
    API_VERSION = os.getenv('API_VERSION', '1.0.0')
    API_PREFIX = os.getenv('API_PREFIX', '/api')
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')
    HOST = os.getenv('HOST', '0.0.0.0')
    PORT = int(os.getenv('PORT', 5000))

    # --- Logging ---
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

    # --- Redis ---
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')

    # --- Celery ---
    CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', REDIS_URL) # Use Redis by default

    # --- Date Endpoint ---
    DEFAULT_TIMEZONE = os.getenv('DEFAULT_TIMEZONE', 'UTC')
    DATE_TRACKING_ENABLED = get_bool_env('DATE_TRACKING_ENABLED', default=True)
    DATE_MESSAGE_TEMPLATE = os.getenv('DATE_MESSAGE_TEMPLATE', "Today's date is {date}")

    # --- Request Headers (set by the edge network) ---
    FORWARDED_FOR_HEADER = os.getenv('FORWARDED_FOR_HEADER', 'X-Forwarded-For')
    REAL_IP_HEADER = os.getenv('REAL_IP_HEADER', 'X-Real-IP')
    GEO_COUNTRY_HEADER = os.getenv('GEO_COUNTRY_HEADER', 'X-Vercel-IP-Country')
    GEO_CITY_HEADER = os.getenv('GEO_CITY_HEADER', 'X-Vercel-IP-City')
    GEO_REGION_HEADER = os.getenv('GEO_REGION_HEADER', 'X-Vercel-IP-Country-Region')
    GEO_TIMEZONE_HEADER = os.getenv('GEO_TIMEZONE_HEADER', 'X-Vercel-IP-Timezone')

    # --- Analytics Settings ---
    ANALYTICS_KEY_PREFIX = os.getenv('ANALYTICS_KEY_PREFIX', 'analytics:')
    ANALYTICS_TTL_SECONDS = int(os.getenv("ANALYTICS_TTL_SECONDS", 60 * 60 * 24 * 30)) # 30 days default
    ANALYTICS_RECENT_LIMIT = int(os.getenv('ANALYTICS_RECENT_LIMIT', 100))
    ANALYTICS_IP_PREFIX_LENGTH = int(os.getenv('ANALYTICS_IP_PREFIX_LENGTH', 10))
    ANALYTICS_IP_MASK = os.getenv('ANALYTICS_IP_MASK', '***')
    ANALYTICS_USER_AGENT_MAX_LENGTH = int(os.getenv('ANALYTICS_USER_AGENT_MAX_LENGTH', 100))
    # Report shaping
    ANALYTICS_TOP_CITIES = int(os.getenv('ANALYTICS_TOP_CITIES', 20))
    ANALYTICS_TOP_REGIONS = int(os.getenv('ANALYTICS_TOP_REGIONS', 20))
    ANALYTICS_RECENT_DISPLAY_LIMIT = int(os.getenv('ANALYTICS_RECENT_DISPLAY_LIMIT', 50))

    # --- Gunicorn Settings ---
    # These are primarily read by gunicorn_config.py but defined here centrally
    GUNICORN_BIND = os.getenv("GUNICORN_BIND", "0.0.0.0:5000")
    # Default workers based on CPU count
    _default_workers = multiprocessing.cpu_count() * 2 + 1
    GUNICORN_WORKERS = int(os.getenv("GUNICORN_WORKERS", _default_workers))
    GUNICORN_WORKER_CLASS = os.getenv("GUNICORN_WORKER_CLASS", "gevent")
    GUNICORN_TIMEOUT = int(os.getenv("GUNICORN_TIMEOUT", 30))
    GUNICORN_KEEPALIVE = int(os.getenv("GUNICORN_KEEPALIVE", 5))
    GUNICORN_MAX_REQUESTS = int(os.getenv("GUNICORN_MAX_REQUESTS", 1000))
    GUNICORN_MAX_REQUESTS_JITTER = int(os.getenv("GUNICORN_MAX_REQUESTS_JITTER", 50))

    # --- Validation ---
    @classmethod
    def validate(cls):
        required_keys = ['REDIS_URL', 'CELERY_BROKER_URL']
        missing_keys = [key for key in required_keys if not getattr(cls, key)]
        if missing_keys:
             # Analytics degrades to a no-op without Redis; the date endpoint keeps working
             print(f"WARNING: Missing configuration keys: {', '.join(missing_keys)}. Analytics will be unavailable.")

        if cls.ANALYTICS_RECENT_LIMIT < 1:
             print(f"WARNING: Invalid ANALYTICS_RECENT_LIMIT '{cls.ANALYTICS_RECENT_LIMIT}'. Falling back to 100.")
             cls.ANALYTICS_RECENT_LIMIT = 100

# Example usage (in other modules):
# from services.config import AppConfig
# redis_url = AppConfig.REDIS_URL
