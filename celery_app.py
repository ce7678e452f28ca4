from celery import Celery

from services.config import AppConfig

# Get broker URL from AppConfig
broker_url = AppConfig.CELERY_BROKER_URL
if not broker_url:
    # Fallback for local development; AppConfig.validate() reports the missing key
    broker_url = 'redis://localhost:6379/0'
    print(f"Warning: CELERY_BROKER_URL not configured. Using default broker: {broker_url}")

# Analytics tasks are fire-and-forget, so no result backend is configured.
celery_app = Celery(
    'tasks',
    broker=broker_url,
    include=[
        'services.tasks.analytics_tasks'
    ] # List of modules to import when the worker starts
)

celery_app.conf.update(
    task_serializer='json', # Use json for task serialization
    accept_content=['json'],  # Accept json content
    timezone='UTC', # Use UTC timezone
    enable_utc=True, # Enable UTC
    task_ignore_result=True, # Nobody waits on analytics results
    # Enqueue once; a failed publish is logged by the caller and dropped
    task_publish_retry=False,
    # Broker connection pool limits (adjust based on needs)
    broker_pool_limit=10,
    # Keep the structlog root handlers configured by the app
    worker_hijack_root_logger=False,
)

if __name__ == '__main__':
    # To run the worker: celery -A celery_app worker --loglevel=info
    celery_app.start()
