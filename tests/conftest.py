"""
Pytest configuration and shared fixtures.

Provides a temporary SQLite report store, a fake audit runner and a
TestClient factory so no test starts a real browser.
"""

import pytest
from fastapi.testclient import TestClient

from perfcheck.audit.fake import FakeAuditRunner, build_lighthouse_result
from perfcheck.config import Settings
from perfcheck.main import create_app
from perfcheck.store import ReportStore


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'reports.db'}"


@pytest.fixture
def store(database_url):
    """An opened store on a fresh database file."""
    s = ReportStore(database_url)
    s.open()
    yield s
    s.close()


@pytest.fixture
def settings(database_url):
    return Settings(
        _env_file=None,
        DATABASE_URL=database_url,
        AUDIT_RUNNER="fake",
        AUDIT_TIMEOUT=5,
        LOG_LEVEL="WARNING",
    )


@pytest.fixture
def sample_result():
    return build_lighthouse_result(
        performance=0.5,
        accessibility=1.0,
        best_practices=0.25,
        seo=0.75,
        total_blocking_time=1234.0,
        total_byte_weight=2097152.0,
        request_count=42,
    )


@pytest.fixture
def fake_runner(sample_result):
    return FakeAuditRunner(results={"https://example.com": sample_result})


@pytest.fixture
def make_client(settings):
    """Build a TestClient around create_app; lifespan runs inside the context."""
    clients = []

    def _make(runner=None, **overrides):
        app_settings = settings.model_copy(update=overrides) if overrides else settings
        client = TestClient(create_app(settings=app_settings, runner=runner or FakeAuditRunner()))
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(make_client, fake_runner):
    return make_client(runner=fake_runner)
