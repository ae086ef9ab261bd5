"""
Widget Service - HTTP Route Integration Tests
=============================================

What:  Exercises the FastAPI app end to end over HTTPX's ASGI transport.
How:   `test_client` serves an app backed by a fresh in-memory service;
       Cosmos-backed apps are built on the mocked SDK client from conftest.

What we test:
    ✅ create → get → update → delete → get over HTTP
    ✅ Error bodies {code, message, request_id} and the X-Request-ID header
    ✅ 409 on id conflicts, 422 on non-object bodies
    ✅ List body shape {"value": [...], "nextLink": null}
    ✅ Backend 500 results surface with their message
    ✅ /health for healthy and unreachable backends
    ✅ Generated and static OpenAPI documents, docs page
"""

import pytest
from azure.cosmos.exceptions import CosmosHttpResponseError
from httpx import AsyncClient, ASGITransport

from widget_service.config import Settings
from widget_service.exceptions import ConfigurationError
from widget_service.main import create_app

from conftest import make_client


class TestWidgetCrud:
    """Lifecycle of one widget over HTTP."""

    @pytest.mark.asyncio
    async def test_create_returns_201(self, test_client: AsyncClient):
        response = await test_client.post("/widgets", json={"name": "A"})
        assert response.status_code == 201
        assert response.json() == {"id": "1", "name": "A"}

    @pytest.mark.asyncio
    async def test_full_lifecycle(self, test_client: AsyncClient):
        created = await test_client.post("/widgets", json={"name": "A", "color": "red"})
        widget_id = created.json()["id"]

        fetched = await test_client.get(f"/widgets/{widget_id}")
        assert fetched.status_code == 200
        assert fetched.json() == {"id": widget_id, "name": "A", "color": "red"}

        updated = await test_client.patch(f"/widgets/{widget_id}", json={"name": "B"})
        assert updated.status_code == 200
        assert updated.json() == {"id": widget_id, "name": "B", "color": "red"}

        deleted = await test_client.delete(f"/widgets/{widget_id}")
        assert deleted.status_code == 200
        assert deleted.json() == {"status": "deleted", "id": widget_id}

        gone = await test_client.get(f"/widgets/{widget_id}")
        assert gone.status_code == 404

    @pytest.mark.asyncio
    async def test_patch_cannot_change_id(self, test_client: AsyncClient):
        await test_client.post("/widgets", json={"name": "A"})
        response = await test_client.patch("/widgets/1", json={"id": "9", "name": "B"})
        assert response.json() == {"id": "1", "name": "B"}

    @pytest.mark.asyncio
    async def test_nested_properties_round_trip(self, test_client: AsyncClient):
        body = {"dims": {"w": 1, "h": 2}, "tags": ["a", "b"], "active": True}
        created = await test_client.post("/widgets", json=body)
        fetched = await test_client.get(f"/widgets/{created.json()['id']}")
        assert fetched.json() == {"id": "1", **body}

    @pytest.mark.asyncio
    async def test_supplied_id_conflict_is_409(self, test_client: AsyncClient):
        await test_client.post("/widgets", json={"id": "w-1"})
        response = await test_client.post("/widgets", json={"id": "w-1"})
        assert response.status_code == 409
        assert response.json()["code"] == 409

    @pytest.mark.asyncio
    async def test_numeric_id_is_stored_as_string(self, test_client: AsyncClient):
        response = await test_client.post("/widgets", json={"id": 5, "name": "A"})
        assert response.status_code == 201
        assert response.json() == {"id": "5", "name": "A"}

        fetched = await test_client.get("/widgets/5")
        assert fetched.status_code == 200
        assert fetched.json() == {"id": "5", "name": "A"}

    @pytest.mark.asyncio
    async def test_non_object_body_rejected(self, test_client: AsyncClient):
        response = await test_client.post("/widgets", json=["not", "an", "object"])
        assert response.status_code == 422


class TestWidgetErrors:
    """Error body shape and correlation ids."""

    @pytest.mark.asyncio
    async def test_get_missing_body(self, test_client: AsyncClient):
        response = await test_client.get("/widgets/nope", headers={"X-Request-ID": "req-42"})
        assert response.status_code == 404
        assert response.json() == {
            "code": 404,
            "message": "Widget not found",
            "request_id": "req-42",
        }
        assert response.headers["X-Request-ID"] == "req-42"

    @pytest.mark.asyncio
    async def test_generated_request_id_matches_header(self, test_client: AsyncClient):
        response = await test_client.patch("/widgets/99", json={"name": "B"})
        assert response.status_code == 404
        rid = response.headers["X-Request-ID"]
        assert len(rid) == 8
        assert response.json()["request_id"] == rid

    @pytest.mark.asyncio
    async def test_delete_missing_is_404_by_default(self, test_client: AsyncClient):
        response = await test_client.delete("/widgets/nope")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_missing_with_idempotent_policy(self):
        config = Settings(widget_backend="memory", delete_missing_policy="idempotent")
        async with make_client(create_app(config)) as client:
            response = await client.delete("/widgets/nope")
        assert response.status_code == 200
        assert response.json() == {"status": "deleted", "id": "nope"}

    @pytest.mark.asyncio
    async def test_backend_failure_is_500_with_message(
        self, test_settings, cosmos_service, cosmos_container
    ):
        cosmos_container.read_item.side_effect = CosmosHttpResponseError(
            status_code=503, message="Service is currently unavailable"
        )
        async with make_client(create_app(test_settings, widget_service=cosmos_service)) as client:
            response = await client.get("/widgets/1")

        assert response.status_code == 500
        body = response.json()
        assert body["code"] == 500
        assert body["message"].startswith("Error retrieving widget: ")

    @pytest.mark.asyncio
    async def test_unexpected_exception_is_generic_500(self, test_settings, memory_service):
        async def explode(context, widget_id):
            raise RuntimeError("kaboom")

        memory_service.get = explode
        app = create_app(test_settings, widget_service=memory_service)
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/widgets/1")

        assert response.status_code == 500
        assert "kaboom" not in response.text
        assert response.json()["code"] == 500


class TestWidgetList:
    """GET /widgets."""

    @pytest.mark.asyncio
    async def test_empty_list(self, test_client: AsyncClient):
        response = await test_client.get("/widgets")
        assert response.status_code == 200
        assert response.json() == {"value": [], "nextLink": None}

    @pytest.mark.asyncio
    async def test_list_after_creates(self, test_client: AsyncClient):
        await test_client.post("/widgets", json={"name": "A"})
        await test_client.post("/widgets", json={"name": "B"})
        response = await test_client.get("/widgets")
        assert response.json() == {
            "value": [{"id": "1", "name": "A"}, {"id": "2", "name": "B"}],
            "nextLink": None,
        }


class TestHealth:
    """GET /health."""

    @pytest.mark.asyncio
    async def test_memory_backend_healthy(self, test_client: AsyncClient):
        response = await test_client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["backend"] == "memory"
        assert data["backend_status"] == "available"
        assert data["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_unreachable_cosmos_is_503(self, test_settings, cosmos_service, cosmos_container):
        cosmos_container.read.side_effect = CosmosHttpResponseError(
            status_code=401, message="Unauthorized"
        )
        async with make_client(create_app(test_settings, widget_service=cosmos_service)) as client:
            response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["backend"] == "cosmos"


class TestApiDocs:
    """OpenAPI document and docs UI."""

    @pytest.mark.asyncio
    async def test_generated_openapi_lists_widget_paths(self, test_client: AsyncClient):
        response = await test_client.get("/openapi.json")
        assert response.status_code == 200
        paths = response.json()["paths"]
        assert "/widgets" in paths
        assert "/widgets/{widget_id}" in paths
        assert set(paths["/widgets/{widget_id}"]) == {"get", "patch", "delete"}

    @pytest.mark.asyncio
    async def test_docs_page_served(self, test_client: AsyncClient):
        response = await test_client.get("/api-docs")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]

    @pytest.mark.asyncio
    async def test_static_openapi_document(self, tmp_path, memory_service):
        spec_file = tmp_path / "openapi.yaml"
        spec_file.write_text(
            "openapi: 3.0.1\n"
            "info:\n"
            "  title: Widgets\n"
            "  version: '1.0'\n"
            "paths:\n"
            "  /widgets: {}\n",
            encoding="utf-8",
        )
        config = Settings(widget_backend="memory", openapi_spec_path=str(spec_file))

        async with make_client(create_app(config, widget_service=memory_service)) as client:
            response = await client.get("/openapi.json")

        assert response.json()["info"]["title"] == "Widgets"
        assert list(response.json()["paths"]) == ["/widgets"]

    def test_unreadable_static_document_fails_app_creation(self, tmp_path, memory_service):
        config = Settings(
            widget_backend="memory",
            openapi_spec_path=str(tmp_path / "missing.yaml"),
        )
        with pytest.raises(ConfigurationError):
            create_app(config, widget_service=memory_service)
