# Services package init
"""
Widget Service - Services Layer
===============================

What:  The resource-service contract and its storage backends.
How:   Routes receive one WidgetService instance (chosen by factory.py from
       settings) through FastAPI's dependency injection.

Service Inventory:
    - WidgetService (abstract): get / create / update / delete / list contract
    - InMemoryWidgetService: process-local ordered list
    - CosmosWidgetService: Azure Cosmos DB container
    - build_widget_service: settings → backend instance
"""
