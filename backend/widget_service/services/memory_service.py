"""
Widget Service - In-Memory Backend
==================================

What:  WidgetService backed by an ordered list owned by the service instance.
How:   Linear scan by id for get/update/delete; append on create.
Who:   Default backend (WIDGET_BACKEND=memory); also used by the test suite.
When:  Constructed once at startup; data lives as long as the instance.

Concurrency:
    A threading.Lock guards every read-modify-write of the list. No critical
    section awaits, so holding a thread lock inside these coroutines never
    blocks the event loop for longer than one scan.

Isolation:
    Stored widgets are deep copies of what callers pass in, and every result
    is a deep copy of what is stored. Mutating a returned widget never
    changes the store.

Identifier policy:
    New ids are str(len(widgets) + 1) at the moment of creation. After a
    deletion this can produce an id that is still in use (e.g. create 1, 2,
    delete 1, create -> "2"). Such a collision is reported as 409 Conflict and
    nothing is stored.

This backend performs no I/O and never returns a 500.
"""

import logging
import threading
from typing import Any, List, Mapping, Optional

from widget_service.config import DELETE_MISSING_NOT_FOUND
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


class InMemoryWidgetService(WidgetService):
    """Widget storage in a process-local list."""

    name = "memory"

    def __init__(self, delete_missing_policy: str = DELETE_MISSING_NOT_FOUND):
        super().__init__(delete_missing_policy=delete_missing_policy)
        self._widgets: List[Widget] = []
        self._lock = threading.Lock()

    def _index_of(self, widget_id: str) -> Optional[int]:
        # Caller must hold self._lock
        for index, widget in enumerate(self._widgets):
            if widget.id == widget_id:
                return index
        return None

    async def get(self, context: RequestContext, widget_id: str) -> WidgetResult:
        with self._lock:
            index = self._index_of(widget_id)
            if index is None:
                return WidgetServiceError.not_found()
            return self._widgets[index].model_copy(deep=True)

    async def update(
        self,
        context: RequestContext,
        widget_id: str,
        properties: Mapping[str, Any],
    ) -> WidgetResult:
        with self._lock:
            index = self._index_of(widget_id)
            if index is None:
                return WidgetServiceError.not_found()
            merged = self._widgets[index].merge(properties).model_copy(deep=True)
            self._widgets[index] = merged
            return merged.model_copy(deep=True)

    async def delete(self, context: RequestContext, widget_id: str) -> DeleteResult:
        with self._lock:
            index = self._index_of(widget_id)
            if index is None:
                return self.missing_on_delete(widget_id)
            del self._widgets[index]
        logger.info("Widget deleted: %s", widget_id)
        return ResourceDeleted(id=widget_id)

    async def create(
        self,
        context: RequestContext,
        properties: Mapping[str, Any],
    ) -> WidgetResult:
        with self._lock:
            widget_id = supplied_id(properties) or str(len(self._widgets) + 1)
            if self._index_of(widget_id) is not None:
                logger.warning("Widget id collision on create: %s", widget_id)
                return WidgetServiceError.conflict(widget_id)
            widget = Widget.from_document({**properties, "id": widget_id}).model_copy(deep=True)
            self._widgets.append(widget)
        logger.info("Widget created: %s", widget_id)
        return widget.model_copy(deep=True)

    async def list(self, context: RequestContext) -> ListResult:
        with self._lock:
            snapshot = [widget.model_copy(deep=True) for widget in self._widgets]
        return WidgetCollection(value=snapshot, next_link=None)
