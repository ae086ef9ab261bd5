# Middleware package init
"""
Widget Service - Middleware Package
===================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (outermost first):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    - Request ID sets the correlation id before anything logs.
    - Logging sees the final status code and the full duration.
"""
