import pytest

from log_ingestor.app import create_app
from log_ingestor.config import Config
from log_ingestor.models import LogRecord
from log_ingestor.store import LogStore


@pytest.fixture
def sample_log():
    return {
        "level": "error",
        "message": "Failed to connect to DB",
        "resourceId": "server-1234",
        "timestamp": "2023-09-15T08:00:00Z",
        "traceId": "abc-xyz-123",
        "spanId": "span-456",
        "commit": "5e5342f",
        "metadata": {
            "parentResourceId": "server-0987",
        },
    }


@pytest.fixture
def scenario_logs():
    """Three records: two errors on different resources, one info."""
    return [
        {"level": "error", "message": "disk full", "resourceId": "r1",
         "timestamp": "2023-09-10T01:00:00Z"},
        {"level": "info", "message": "ok", "resourceId": "r1",
         "timestamp": "2023-09-10T02:00:00Z"},
        {"level": "error", "message": "Failed to connect", "resourceId": "r2",
         "timestamp": "2023-09-20T00:00:00Z"},
    ]


@pytest.fixture
def store():
    return LogStore()


@pytest.fixture
def scenario_store(store, scenario_logs):
    for data in scenario_logs:
        store.ingest(LogRecord.from_dict(data))
    return store


@pytest.fixture
def config():
    return Config(environ={})


@pytest.fixture
def app(config, store):
    """Create a Flask test app sharing the store fixture."""
    application = create_app(config=config, store=store)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
