"""
Widget Service - Pydantic Request/Response Schemas
==================================================

What:  Models describing the HTTP contract of the widget routes.
How:   FastAPI uses these to parse request bodies, serialize responses, and
       generate the OpenAPI document served at /api-docs.
Who:   Used by routes/widgets.py and routes/health.py.

Widgets are open objects: request and response bodies accept any extra keys
(`extra="allow"`), and only `id` is declared. The domain Widget
({id, properties}) is flattened into these schemas at the route boundary.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from widget_service.models.widget import Widget, WidgetCollection


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class WidgetCreate(BaseModel):
    """
    Body of POST /widgets.

    Any JSON properties are accepted. `id` is optional; the backend assigns
    one when it is missing or empty.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={"examples": [{"name": "A", "color": "red"}]},
    )

    # Numbers are accepted and stored as their string form
    id: Optional[Union[str, int]] = Field(default=None, description="Optional caller-chosen id")

    def to_properties(self) -> Dict[str, Any]:
        properties = self.model_dump()
        if properties.get("id") is None:
            properties.pop("id", None)
        return properties


class WidgetUpdate(BaseModel):
    """
    Body of PATCH /widgets/{id}.

    Keys present overwrite the stored values; keys absent are kept. An `id`
    key is ignored.
    """

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={"examples": [{"name": "B"}]},
    )

    def to_properties(self) -> Dict[str, Any]:
        return self.model_dump()


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class WidgetResponse(BaseModel):
    """A widget as returned to clients: `id` plus every stored property."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Unique widget identifier")

    @classmethod
    def from_widget(cls, widget: Widget) -> "WidgetResponse":
        return cls.model_validate(widget.to_document())


class WidgetCollectionResponse(BaseModel):
    """Body of GET /widgets. `nextLink` is always null (no pagination)."""

    model_config = ConfigDict(populate_by_name=True)

    value: List[WidgetResponse] = Field(description="Every stored widget")
    next_link: Optional[str] = Field(
        default=None,
        alias="nextLink",
        description="Continuation link; always null",
    )

    @classmethod
    def from_collection(cls, collection: WidgetCollection) -> "WidgetCollectionResponse":
        return cls(
            value=[WidgetResponse.from_widget(widget) for widget in collection.value],
            next_link=collection.next_link,
        )


class DeletedResponse(BaseModel):
    """Body of a successful DELETE /widgets/{id}."""

    status: str = Field(default="deleted", description="Always 'deleted'")
    id: str = Field(description="Id that was deleted")


# ══════════════════════════════════════════════════════════════════════════
# Error / Health Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body for every failed request.

    Example:
        {"code": 404, "message": "Widget not found", "request_id": "1f2e3d4c"}
    """

    code: int = Field(description="HTTP status code")
    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Body of GET /health."""

    status: str = Field(description="Overall service status: healthy or unhealthy")
    version: str = Field(description="Application version")
    backend: str = Field(description="Active storage backend: memory or cosmos")
    backend_status: str = Field(description="Backend connectivity: available or unavailable")
    uptime_seconds: float = Field(description="Seconds since service started")
