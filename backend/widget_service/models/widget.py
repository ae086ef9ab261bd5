"""
Widget Service - Domain Models
==============================

What:  The values that cross the WidgetService contract.
How:   Plain Pydantic models. No backend or HTTP knowledge lives here.
Who:   Produced and consumed by every backend; serialized by the routes.

Models:
    Widget              id + open property map, with shallow-merge semantics
    WidgetServiceError  {code, message} result returned instead of raising
    ResourceDeleted     {status: "deleted", id} marker returned by delete
    WidgetCollection    listing result; next_link is always None

Store/wire form of a Widget is the flat document {"id": ..., **properties}.
"""

from typing import Any, Dict, List, Literal, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Widget(BaseModel):
    """
    A widget: a fixed identity plus caller-supplied properties.

    Invariants:
        - `id` is a non-empty string and never changes after creation
        - `properties` never contains an "id" key
    """

    id: str = Field(min_length=1, description="Unique widget identifier")
    properties: Dict[str, Any] = Field(
        default_factory=dict,
        description="Open set of caller-supplied properties",
    )

    @classmethod
    def from_document(cls, document: Mapping[str, Any]) -> "Widget":
        """Split a flat stored document into identity and properties."""
        properties = {key: value for key, value in document.items() if key != "id"}
        return cls(id=str(document["id"]), properties=properties)

    def to_document(self) -> Dict[str, Any]:
        """Flat form used on the wire and in the document store."""
        return {"id": self.id, **self.properties}

    def merge(self, partial: Mapping[str, Any]) -> "Widget":
        """
        Shallow merge of `partial` over this widget's properties.

        Every key in `partial` overwrites the existing value, keys absent from
        `partial` are kept, nested values are replaced whole (no deep merge),
        and there is no way to remove a key. An "id" key in `partial` is
        ignored. Returns a new Widget; this one is left untouched.
        """
        merged = dict(self.properties)
        for key, value in partial.items():
            if key == "id":
                continue
            merged[key] = value
        return Widget(id=self.id, properties=merged)


def supplied_id(properties: Mapping[str, Any]) -> Optional[str]:
    """Caller-supplied id from create properties, or None when absent or empty."""
    value = properties.get("id")
    if value is None or value == "":
        return None
    return str(value)


class WidgetServiceError(BaseModel):
    """
    Structured failure returned (not raised) by WidgetService operations.

    `code` is an HTTP-style status so the router can use it directly.
    """

    code: int = Field(description="HTTP-style status code")
    message: str = Field(description="Human-readable error description")

    @classmethod
    def not_found(cls) -> "WidgetServiceError":
        return cls(code=404, message="Widget not found")

    @classmethod
    def conflict(cls, widget_id: str) -> "WidgetServiceError":
        return cls(code=409, message=f"Widget with id '{widget_id}' already exists")

    @classmethod
    def internal(cls, message: str) -> "WidgetServiceError":
        return cls(code=500, message=message)


class ResourceDeleted(BaseModel):
    """Marker returned by a successful delete."""

    status: Literal["deleted"] = "deleted"
    id: str


class WidgetCollection(BaseModel):
    """
    Listing of every widget a backend currently holds.

    Pagination is not performed; `next_link` is always None and is
    serialized as `nextLink`.
    """

    model_config = ConfigDict(populate_by_name=True)

    value: List[Widget] = Field(default_factory=list)
    next_link: Optional[str] = Field(default=None, alias="nextLink")


WidgetResult = Union[Widget, WidgetServiceError]
DeleteResult = Union[ResourceDeleted, WidgetServiceError]
ListResult = Union[WidgetCollection, WidgetServiceError]


def is_error(result: Any) -> bool:
    """Discriminant check for every contract result."""
    return isinstance(result, WidgetServiceError)
