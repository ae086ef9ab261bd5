"""
Widget Service - Abstract Resource Service Contract
===================================================

What:  Abstract base class every storage backend implements.
How:   Concrete backends inherit from WidgetService and implement the five
       operations. The backend is chosen once at startup (services.factory)
       and handed to the routes, which only ever see this interface.
Who:   Called by the route handlers in routes/widgets.py.

Contract:
    - Every operation takes a RequestContext first. Backends accept it and do
      not inspect it; it exists so tracing or auth can be threaded through
      without changing signatures.
    - Every operation returns either a success value or a WidgetServiceError.
      Expected failures (not found, backend fault, id conflict) are never
      raised.
    - Codes: 404 not found, 409 id conflict, 500 backend fault.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from widget_service.config import DELETE_MISSING_IDEMPOTENT, DELETE_MISSING_NOT_FOUND
from widget_service.models.widget import (
    DeleteResult,
    ListResult,
    ResourceDeleted,
    WidgetResult,
    WidgetServiceError,
)


@dataclass(frozen=True)
class RequestContext:
    """Opaque per-request value passed through every contract operation."""

    request_id: str = ""
    extras: Dict[str, Any] = field(default_factory=dict)


class WidgetService(ABC):
    """
    Abstract interface for widget storage.

    Implementations:
        - InMemoryWidgetService: ordered list held by the instance
        - CosmosWidgetService:   Azure Cosmos DB container
    """

    name: str = "abstract"

    def __init__(self, delete_missing_policy: str = DELETE_MISSING_NOT_FOUND):
        self.delete_missing_policy = delete_missing_policy

    @abstractmethod
    async def get(self, context: RequestContext, widget_id: str) -> WidgetResult:
        """
        Fetch one widget.

        Returns:
            The exact stored Widget, WidgetServiceError 404 if no widget has
            `widget_id`, or 500 if the backend faulted during the lookup.
        """
        ...

    @abstractmethod
    async def update(
        self,
        context: RequestContext,
        widget_id: str,
        properties: Mapping[str, Any],
    ) -> WidgetResult:
        """
        Shallow-merge `properties` into an existing widget (see Widget.merge).

        Returns:
            The merged Widget, 404 if absent, 500 on backend fault.
        """
        ...

    @abstractmethod
    async def delete(self, context: RequestContext, widget_id: str) -> DeleteResult:
        """
        Remove a widget.

        Returns:
            ResourceDeleted on success. A missing id yields 404 or the
            ResourceDeleted marker depending on `delete_missing_policy`.
            500 on backend fault.
        """
        ...

    @abstractmethod
    async def create(
        self,
        context: RequestContext,
        properties: Mapping[str, Any],
    ) -> WidgetResult:
        """
        Store a new widget, assigning an id when the caller supplied none.

        Returns:
            The stored Widget, 409 if the id is already taken (in-memory),
            500 on backend fault.
        """
        ...

    @abstractmethod
    async def list(self, context: RequestContext) -> ListResult:
        """
        Return every widget currently held, unfiltered and unpaginated.

        Returns:
            WidgetCollection with `next_link` None, or 500 on backend fault.
        """
        ...

    def missing_on_delete(self, widget_id: str) -> DeleteResult:
        """Result for a delete that targeted an id the backend does not hold."""
        if self.delete_missing_policy == DELETE_MISSING_IDEMPOTENT:
            return ResourceDeleted(id=widget_id)
        return WidgetServiceError.not_found()

    async def health_check(self) -> bool:
        """True when the backend can serve requests. Never raises."""
        return True

    async def close(self) -> None:
        """Release backend resources. Called once at application shutdown."""
        return None
