"""
Widget Service - Widget Route Handlers
======================================

What:  CRUD endpoints for the Widget resource.
How:   Each handler builds a RequestContext, calls exactly one WidgetService
       operation on the backend stored in app.state, and either serializes
       the value or raises ServiceErrorResponse for a returned
       WidgetServiceError (the global handler in main.py renders it).
Who:   Any HTTP client; documented at /api-docs.

Routes:
    GET    /widgets          list      → 200 {"value": [...], "nextLink": null}
    GET    /widgets/{id}     get       → 200 widget
    POST   /widgets          create    → 201 widget
    PATCH  /widgets/{id}     update    → 200 merged widget
    DELETE /widgets/{id}     delete    → 200 {"status": "deleted", "id": ...}
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from widget_service.exceptions import ServiceErrorResponse
from widget_service.middleware.request_id import request_id_var
from widget_service.models.widget import is_error
from widget_service.schemas.widget import (
    DeletedResponse,
    ErrorResponse,
    WidgetCollectionResponse,
    WidgetCreate,
    WidgetResponse,
    WidgetUpdate,
)
from widget_service.services.widget_base import RequestContext, WidgetService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/widgets", tags=["Widgets"])

_NOT_FOUND = {404: {"description": "Widget not found", "model": ErrorResponse}}
_INTERNAL = {500: {"description": "Storage backend error", "model": ErrorResponse}}


# ── Dependencies ──────────────────────────────────────────────────────────

def get_widget_service(request: Request) -> WidgetService:
    """The backend constructed by create_app() for this application."""
    return request.app.state.widget_service


def get_request_context(request: Request) -> RequestContext:
    rid = getattr(request.state, "request_id", "") or request_id_var.get("")
    return RequestContext(request_id=rid)


def _unwrap(result: Any, context: RequestContext) -> Any:
    """Return a success value or raise the returned WidgetServiceError."""
    if is_error(result):
        raise ServiceErrorResponse(result, context={"request_id": context.request_id})
    return result


# ── Routes ────────────────────────────────────────────────────────────────

@router.get(
    "",
    response_model=WidgetCollectionResponse,
    responses={**_INTERNAL},
    summary="List widgets",
    description="Returns every stored widget. No filtering, sorting, or pagination.",
)
async def list_widgets(
    service: WidgetService = Depends(get_widget_service),
    context: RequestContext = Depends(get_request_context),
) -> WidgetCollectionResponse:
    collection = _unwrap(await service.list(context), context)
    return WidgetCollectionResponse.from_collection(collection)


@router.get(
    "/{widget_id}",
    response_model=WidgetResponse,
    responses={**_NOT_FOUND, **_INTERNAL},
    summary="Get a widget by id",
)
async def get_widget(
    widget_id: str,
    service: WidgetService = Depends(get_widget_service),
    context: RequestContext = Depends(get_request_context),
) -> WidgetResponse:
    widget = _unwrap(await service.get(context, widget_id), context)
    return WidgetResponse.from_widget(widget)


@router.post(
    "",
    response_model=WidgetResponse,
    status_code=201,
    responses={
        409: {"description": "Widget id already in use", "model": ErrorResponse},
        **_INTERNAL,
    },
    summary="Create a widget",
    description="Stores the posted properties. An id is assigned when none is supplied.",
)
async def create_widget(
    body: WidgetCreate,
    service: WidgetService = Depends(get_widget_service),
    context: RequestContext = Depends(get_request_context),
) -> WidgetResponse:
    widget = _unwrap(await service.create(context, body.to_properties()), context)
    return WidgetResponse.from_widget(widget)


@router.patch(
    "/{widget_id}",
    response_model=WidgetResponse,
    responses={**_NOT_FOUND, **_INTERNAL},
    summary="Update a widget",
    description=(
        "Shallow merge: every supplied property overwrites the stored value, "
        "properties not supplied are kept. The id never changes."
    ),
)
async def update_widget(
    widget_id: str,
    body: WidgetUpdate,
    service: WidgetService = Depends(get_widget_service),
    context: RequestContext = Depends(get_request_context),
) -> WidgetResponse:
    widget = _unwrap(await service.update(context, widget_id, body.to_properties()), context)
    return WidgetResponse.from_widget(widget)


@router.delete(
    "/{widget_id}",
    response_model=DeletedResponse,
    responses={**_NOT_FOUND, **_INTERNAL},
    summary="Delete a widget",
)
async def delete_widget(
    widget_id: str,
    service: WidgetService = Depends(get_widget_service),
    context: RequestContext = Depends(get_request_context),
) -> DeletedResponse:
    deleted = _unwrap(await service.delete(context, widget_id), context)
    return DeletedResponse(status=deleted.status, id=deleted.id)
