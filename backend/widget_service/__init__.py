"""
Widget Service - Application Package Initializer
================================================

What: Marks the `widget_service` directory as a Python package.
Who:  Used by uvicorn (`widget_service.main:app`), pytest, and `python -m widget_service`.

Architecture Note:
    The backend is split into layers that only depend downwards:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   WidgetService contract (ABC)      │  ← get / create / update / delete / list
    ├──────────────────┬──────────────────┤
    │ InMemoryWidget-  │ CosmosWidget-    │  ← interchangeable storage backends
    │ Service          │ Service          │
    ├──────────────────┴──────────────────┤
    │        Models (Widget, results)     │
    └─────────────────────────────────────┘

    Routes receive the backend chosen at startup and never import a concrete
    backend. Backends never import anything from the HTTP layer.
"""

__version__ = "1.0.0"
