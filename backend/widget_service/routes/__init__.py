# Routes package init
"""
Widget Service - API Routes Package
===================================

What:  HTTP route handlers. They are the only callers of the WidgetService
       contract.

Route Inventory:
    - widgets.py:  /widgets, /widgets/{id}   (list, get, create, update, delete)
    - health.py:   GET /health               (service and backend health)

Routes handle HTTP concerns only: read the request, call one service
operation, translate the result into a response.
"""
