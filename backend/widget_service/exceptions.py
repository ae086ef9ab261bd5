"""
Widget Service - Application Exception Hierarchy
================================================

What:  Exceptions raised by the application layer (router, factory, startup).
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) turn them into
       structured JSON responses.

The storage backends do NOT raise these. Every WidgetService operation
returns either a value or a `WidgetServiceError` result. The router is the
seam where a returned error becomes a raised `ServiceErrorResponse`, so route
handlers stay linear and all error formatting lives in one handler.

Exception Hierarchy:
    WidgetApiError (base)
    ├── ServiceErrorResponse   → HTTP status taken from the carried result
    └── ConfigurationError     → 500 Internal Server Error
"""

from typing import Any, Dict, Optional

from widget_service.models.widget import WidgetServiceError


class WidgetApiError(Exception):
    """
    Base exception for all application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ServiceErrorResponse(WidgetApiError):
    """
    Carries a `WidgetServiceError` returned by a backend up to the error handler.

    HTTP:    `error.code` (the result code is already an HTTP status)
    """

    def __init__(
        self,
        error: WidgetServiceError,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=error.message, context=context)
        self.error = error
        self.status_code = error.code


class ConfigurationError(WidgetApiError):
    """
    Raised when settings cannot be turned into a working application.

    When:    Unknown backend name reaches the factory, or the configured
             OpenAPI document cannot be read or is not a mapping.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
