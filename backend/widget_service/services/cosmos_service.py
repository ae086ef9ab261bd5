"""
Widget Service - Azure Cosmos DB Backend
========================================

What:  WidgetService backed by a Cosmos DB container (async azure-cosmos SDK).
How:   Widgets are stored as flat JSON documents {"id": ..., **properties}.
       Items are addressed by id plus a partition key value:
         - partition key mode "id":   partition key value == widget id
         - partition key mode "none": container without a partition key,
                                      addressed with NonePartitionKeyValue
Who:   Selected with WIDGET_BACKEND=cosmos.
When:  Constructed at startup. The SDK client is created lazily on the first
       operation, so missing or wrong settings show up as a 500 result from
       that operation and never as a startup failure.

Failure mapping:
    Every exception from the store goes through `_backend_error`, which logs
    the backend text and builds a 500 WidgetServiceError:
        error detail on:   "Error retrieving widget: <backend message>"
        error detail off:  "Error retrieving widget"
    The one exception is an item-level not-found (404 from the store whose
    sub-status is not "owner resource does not exist"), which becomes 404 for
    get/update and is passed to the delete policy for delete.

Read-modify-write:
    update reads the document, merges in Python, and writes it back with
    replace_item. No ETag is sent, so a concurrent write between the read and
    the replace is overwritten (last writer wins).
"""

import logging
import time
from typing import Any, Dict, Mapping, Optional

from azure.cosmos.aio import CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.cosmos.partition_key import NonePartitionKeyValue

from widget_service.config import DELETE_MISSING_NOT_FOUND, PARTITION_KEY_ID
from widget_service.models.widget import (
    DeleteResult,
    ListResult,
    ResourceDeleted,
    Widget,
    WidgetCollection,
    WidgetResult,
    WidgetServiceError,
    supplied_id,
)
from widget_service.services.widget_base import RequestContext, WidgetService

logger = logging.getLogger(__name__)

# Properties Cosmos DB adds to every stored document
SYSTEM_PROPERTIES = ("_rid", "_self", "_etag", "_attachments", "_ts")

# Cosmos sub-status for a 404 caused by a missing database or container
OWNER_RESOURCE_NOT_FOUND = 1003


def _is_missing_item(error: Exception) -> bool:
    if not isinstance(error, CosmosResourceNotFoundError):
        return False
    return getattr(error, "sub_status", None) != OWNER_RESOURCE_NOT_FOUND


def _strip_system_properties(document: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in document.items() if key not in SYSTEM_PROPERTIES}


class CosmosWidgetService(WidgetService):
    """
    Widget storage in an Azure Cosmos DB container.

    Args:
        endpoint: Account URL (COSMOS_DB_ENDPOINT)
        key: Account key (COSMOS_DB_KEY)
        database_id: Database name, default "WidgetsDb"
        container_id: Container name, default "Widgets"
        partition_key_mode: "id" or "none"
        error_detail: Include the backend's error text in 500 messages
        delete_missing_policy: "not_found" or "idempotent"
        client: Pre-built CosmosClient (tests, shared clients). When given,
                endpoint and key are not used and close() leaves it open;
                the caller that built it closes it.
    """

    name = "cosmos"

    def __init__(
        self,
        endpoint: str = "",
        key: str = "",
        database_id: str = "WidgetsDb",
        container_id: str = "Widgets",
        partition_key_mode: str = PARTITION_KEY_ID,
        error_detail: bool = True,
        delete_missing_policy: str = DELETE_MISSING_NOT_FOUND,
        client: Optional[CosmosClient] = None,
    ):
        super().__init__(delete_missing_policy=delete_missing_policy)
        self.endpoint = endpoint
        self.key = key
        self.database_id = database_id
        self.container_id = container_id
        self.partition_key_mode = partition_key_mode
        self.error_detail = error_detail
        self._client = client
        self._owns_client = False
        self._container = None

    # ── Connection ────────────────────────────────────────────────────────

    def _get_container(self):
        """Container proxy, creating the client on first use. May raise."""
        if self._container is None:
            if self._client is None:
                logger.info(
                    "Connecting to Cosmos DB database=%s container=%s",
                    self.database_id,
                    self.container_id,
                )
                self._client = CosmosClient(self.endpoint, credential=self.key)
                self._owns_client = True
            database = self._client.get_database_client(self.database_id)
            self._container = database.get_container_client(self.container_id)
        return self._container

    def _partition_key(self, widget_id: str) -> Any:
        if self.partition_key_mode == PARTITION_KEY_ID:
            return widget_id
        return NonePartitionKeyValue

    @staticmethod
    def _generate_id() -> str:
        # Millisecond timestamp; two creates in the same millisecond collide
        return str(int(time.time() * 1000))

    @staticmethod
    def _to_widget(document: Mapping[str, Any]) -> Widget:
        return Widget.from_document(_strip_system_properties(document))

    def _backend_error(
        self,
        prefix: str,
        error: Exception,
        widget_id: Optional[str] = None,
    ) -> WidgetServiceError:
        """Single mapping from any store failure to a 500 result."""
        detail = getattr(error, "message", None) or str(error) or "Unknown error"
        logger.error(
            "%s (id=%s, %s): %s",
            prefix,
            widget_id or "-",
            type(error).__name__,
            detail,
        )
        if self.error_detail:
            return WidgetServiceError.internal(f"{prefix}: {detail}")
        return WidgetServiceError.internal(prefix)

    # ── Contract ──────────────────────────────────────────────────────────

    async def get(self, context: RequestContext, widget_id: str) -> WidgetResult:
        try:
            container = self._get_container()
            document = await container.read_item(
                item=widget_id,
                partition_key=self._partition_key(widget_id),
            )
        except Exception as e:
            if _is_missing_item(e):
                return WidgetServiceError.not_found()
            return self._backend_error("Error retrieving widget", e, widget_id)

        if not document:
            return WidgetServiceError.not_found()
        return self._to_widget(document)

    async def update(
        self,
        context: RequestContext,
        widget_id: str,
        properties: Mapping[str, Any],
    ) -> WidgetResult:
        try:
            container = self._get_container()
            existing = await container.read_item(
                item=widget_id,
                partition_key=self._partition_key(widget_id),
            )
            if not existing:
                return WidgetServiceError.not_found()
            merged = self._to_widget(existing).merge(properties)
            replaced = await container.replace_item(item=widget_id, body=merged.to_document())
        except Exception as e:
            if _is_missing_item(e):
                return WidgetServiceError.not_found()
            return self._backend_error("Error updating widget", e, widget_id)

        return self._to_widget(replaced)

    async def delete(self, context: RequestContext, widget_id: str) -> DeleteResult:
        # Issued without a pre-read; the store's own not-found goes to the policy
        try:
            container = self._get_container()
            await container.delete_item(
                item=widget_id,
                partition_key=self._partition_key(widget_id),
            )
        except Exception as e:
            if _is_missing_item(e):
                logger.info("Delete of missing widget %s (policy=%s)", widget_id, self.delete_missing_policy)
                return self.missing_on_delete(widget_id)
            return self._backend_error("Error deleting widget", e, widget_id)

        logger.info("Widget deleted: %s", widget_id)
        return ResourceDeleted(id=widget_id)

    async def create(
        self,
        context: RequestContext,
        properties: Mapping[str, Any],
    ) -> WidgetResult:
        widget_id = supplied_id(properties) or self._generate_id()
        document = {**properties, "id": widget_id}
        try:
            container = self._get_container()
            created = await container.create_item(body=document)
        except Exception as e:
            return self._backend_error("Failed to create widget", e, widget_id)

        logger.info("Widget created: %s", widget_id)
        return self._to_widget(created)

    async def list(self, context: RequestContext) -> ListResult:
        try:
            container = self._get_container()
            documents = [document async for document in container.read_all_items()]
        except Exception as e:
            return self._backend_error("Error listing widgets", e)

        return WidgetCollection(
            value=[self._to_widget(document) for document in documents],
            next_link=None,
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def health_check(self) -> bool:
        try:
            container = self._get_container()
            await container.read()
            return True
        except Exception as e:
            logger.warning("Cosmos DB health check failed: %s", str(e))
            return False

    async def close(self) -> None:
        # Injected clients belong to the caller
        if self._owns_client and self._client is not None:
            await self._client.close()
            logger.info("Cosmos DB client closed")
            self._client = None
            self._owns_client = False
        self._container = None
