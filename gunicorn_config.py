"""
Gunicorn settings for the Timezone Date API, read from AppConfig.

Usage:
    gunicorn -c gunicorn_config.py app:app
"""

from services.config import AppConfig

bind = AppConfig.GUNICORN_BIND
workers = AppConfig.GUNICORN_WORKERS
worker_class = AppConfig.GUNICORN_WORKER_CLASS
timeout = AppConfig.GUNICORN_TIMEOUT
keepalive = AppConfig.GUNICORN_KEEPALIVE

# Recycle workers periodically
max_requests = AppConfig.GUNICORN_MAX_REQUESTS
max_requests_jitter = AppConfig.GUNICORN_MAX_REQUESTS_JITTER

proc_name = "timezone_date_api"
loglevel = AppConfig.LOG_LEVEL.lower()
preload_app = True

def on_starting(server):
    server.log.info(f"Starting Timezone Date API on {bind} with {workers} {worker_class} workers")
