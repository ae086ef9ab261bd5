"""
Widget Service - Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixtures (function-scoped, fresh for each test):
    ├── context:          RequestContext passed to service operations
    ├── memory_service:   empty InMemoryWidgetService
    ├── cosmos_container: MagicMock container proxy with AsyncMock operations
    ├── cosmos_client:    MagicMock CosmosClient returning cosmos_container
    ├── cosmos_service:   CosmosWidgetService wired to cosmos_client
    └── test_client:      HTTPX AsyncClient bound to an app on memory_service
"""

import os
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set before any widget_service import so the module-level settings and app
# never point at a real Cosmos account
os.environ["WIDGET_BACKEND"] = "memory"
os.environ["LOG_LEVEL"] = "WARNING"
for _name in ("COSMOS_DB_ENDPOINT", "COSMOS_DB_KEY", "OPENAPI_SPEC_PATH"):
    os.environ.pop(_name, None)

from widget_service.config import Settings  # noqa: E402
from widget_service.main import create_app  # noqa: E402
from widget_service.services.cosmos_service import CosmosWidgetService  # noqa: E402
from widget_service.services.memory_service import InMemoryWidgetService  # noqa: E402
from widget_service.services.widget_base import RequestContext  # noqa: E402


async def aiter_items(items):
    """Async iterator standing in for the SDK's AsyncItemPaged."""
    for item in items:
        yield item


@pytest.fixture
def context():
    return RequestContext(request_id="test-req")


@pytest.fixture
def memory_service():
    return InMemoryWidgetService()


@pytest.fixture
def cosmos_container():
    """
    Mock Cosmos container proxy.

    Usage:
        cosmos_container.read_item.return_value = {"id": "1", "name": "A"}
        cosmos_container.read_item.side_effect = CosmosResourceNotFoundError(...)
    """
    container = MagicMock()
    container.read_item = AsyncMock()
    container.create_item = AsyncMock()
    container.replace_item = AsyncMock()
    container.delete_item = AsyncMock()
    container.read = AsyncMock(return_value={"id": "Widgets"})
    container.read_all_items = MagicMock(return_value=aiter_items([]))
    return container


@pytest.fixture
def cosmos_client(cosmos_container):
    client = MagicMock()
    client.get_database_client.return_value.get_container_client.return_value = cosmos_container
    client.close = AsyncMock()
    return client


@pytest.fixture
def cosmos_service(cosmos_client):
    return CosmosWidgetService(client=cosmos_client)


@pytest.fixture
def test_settings():
    return Settings(widget_backend="memory", log_level="WARNING")


def make_client(app):
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def test_client(test_settings, memory_service):
    """
    HTTPX AsyncClient talking to a fresh app backed by `memory_service`.

    Usage:
        async def test_list(test_client):
            response = await test_client.get("/widgets")
            assert response.status_code == 200
    """
    app = create_app(test_settings, widget_service=memory_service)
    async with make_client(app) as client:
        yield client
