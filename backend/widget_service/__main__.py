"""
Run the Widget Service with uvicorn.

Usage:
    python -m widget_service
    widget-service

Host and port come from BACKEND_HOST / BACKEND_PORT (default 0.0.0.0:8080).
"""

import uvicorn

from widget_service.config import settings


def main() -> None:
    uvicorn.run(
        "widget_service.main:app",
        host=settings.backend_host,
        port=settings.backend_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
