import pytest
import fakeredis
import os
import logging
from unittest.mock import patch
from flask import Flask

# Set environment for testing BEFORE creating app
os.environ['FLASK_ENV'] = 'testing'

from app import create_app
from celery_app import celery_app
from services.config import AppConfig


# Configure basic logging for fixture setup/teardown visibility
logging.basicConfig(level=logging.INFO)
log = logging.getLogger(__name__)


# --- Core App Fixtures --- #

class TestingConfig(AppConfig):
    TESTING = True
    LOG_LEVEL = 'DEBUG' # More verbose logging for tests
    REDIS_URL = os.getenv('TEST_REDIS_URL', 'redis://localhost:6379/1') # Use a different DB index (e.g., /1)
    CELERY_BROKER_URL = 'memory://'
    DATE_TRACKING_ENABLED = True


@pytest.fixture(scope='session')
def configured_celery_app():
    """Provides the Celery app instance configured for testing (eager)."""
    celery_app.conf.update(
        task_always_eager=True,  # Tasks run synchronously inside .delay()
        task_eager_propagates=True,  # Unexpected task exceptions surface in tests
        broker_url='memory://',  # In-memory broker
    )
    return celery_app


@pytest.fixture(scope='session')
def fake_redis_server():
    """One in-process Redis server shared by the app and the Celery task."""
    return fakeredis.FakeServer()


@pytest.fixture(scope='session')
def app(configured_celery_app, fake_redis_server):
    """Session-wide test Flask application with TestingConfig and a fake Redis."""
    log.info("--- Creating Test App with TestingConfig --- ")

    def _fake_from_url(url, **kwargs):
        return fakeredis.FakeStrictRedis(server=fake_redis_server, decode_responses=True)

    # Patch redis.from_url for both create_app and the analytics task
    with patch('redis.from_url', side_effect=_fake_from_url):
        _app = create_app(config_object=TestingConfig)
        log.info("Test app created with fake Redis client.")
        yield _app
        log.info("--- Tearing Down Test App ---")


@pytest.fixture()
def client(app: Flask):
    """A test client for the app."""
    return app.test_client()


@pytest.fixture
def request_context(app: Flask):
    """Fixture to provide request context for each test."""
    with app.test_request_context() as context:
        yield context


# --- Redis Fixtures --- #

@pytest.fixture(scope='function')
def redis_client(app):
    """Provides the app's (fake) Redis client, cleared for each function."""
    client = app.redis_client
    if client is None:
        pytest.fail("Fake Redis client not found on app. Check app fixture setup.")

    client.flushdb()
    yield client
    client.flushdb()


@pytest.fixture
def standalone_redis():
    """A fake Redis client not attached to the app, for unit tests."""
    return fakeredis.FakeStrictRedis(decode_responses=True)


# --- Sample Data Fixtures --- #

@pytest.fixture
def geo_headers():
    """Headers as set by the edge network for a request from Paris."""
    return {
        'X-Forwarded-For': '203.0.113.5, 10.0.0.1',
        'X-Vercel-IP-Country': 'FR',
        'X-Vercel-IP-City': 'Paris',
        'X-Vercel-IP-Country-Region': 'IDF',
        'X-Vercel-IP-Timezone': 'Europe/Paris',
        'User-Agent': 'pytest-agent/1.0'
    }


@pytest.fixture
def sample_snapshot():
    """Provides a sample request snapshot dictionary."""
    return {
        'timestamp': 1700000000000,
        'ip': '203.0.113.***',
        'country': 'FR',
        'city': 'Paris',
        'region': 'IDF',
        'timezone': 'Europe/Paris',
        'userAgent': 'pytest-agent/1.0'
    }


# --- Logging Fixture --- #

@pytest.fixture(scope="function", autouse=True)
def setup_test_logging(request):
    """Sets up logging level for each test function."""
    test_name = request.node.name
    root_logger = logging.getLogger()
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)

    yield

    root_logger.setLevel(original_level)
    log.debug(f"Restored root logger level to {logging.getLevelName(original_level)} after {test_name}")
