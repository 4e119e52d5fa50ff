"""
Pytest configuration and fixtures.
"""
import itertools
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from fastapi.testclient import TestClient

from tests.factories import FakeCatalog
from tubefilter.config import Settings
from tubefilter.main import create_app
from tubefilter.repositories.memory import InMemoryRepository
from tubefilter.services.catalog import CatalogGateway


@pytest.fixture
def settings():
    """Settings isolated from the environment's telemetry switches."""
    return Settings(
        CATALOG_API_KEY="test-key",
        ENABLE_PROMETHEUS=False,
        ENABLE_OTEL=False,
    )


@pytest.fixture
def repository():
    return InMemoryRepository()


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture
def catalog(repository, settings, fake_catalog):
    """Real gateway talking to the fake catalog."""
    return CatalogGateway(
        repository,
        settings,
        transport=httpx.MockTransport(fake_catalog.handler),
    )


@pytest.fixture
def test_client(settings, repository, catalog):
    """TestClient over an app wired to the in-memory repository and fake catalog."""
    app = create_app(settings=settings, repository=repository, catalog=catalog)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers(test_client):
    """Headers identifying a freshly registered user."""
    response = test_client.post("/users", json={"username": "viewer"})
    assert response.status_code == 201
    return {"X-User-Id": str(response.json()["id"])}


@pytest.fixture
def ticking_clock(monkeypatch):
    """Repository clock advancing one second per reading."""
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = itertools.count()
    monkeypatch.setattr(
        "tubefilter.repositories.memory._utcnow",
        lambda: start + timedelta(seconds=next(ticks)),
    )
