"""
Widget Service - Backend Factory
================================

What:  Builds the WidgetService implementation named by the settings.
Who:   Called by create_app() when no service is injected explicitly.
When:  Once per application instance, at construction time.
"""

import logging
from typing import Optional

from widget_service.config import BACKEND_COSMOS, BACKEND_MEMORY, Settings, settings
from widget_service.exceptions import ConfigurationError
from widget_service.services.cosmos_service import CosmosWidgetService
from widget_service.services.memory_service import InMemoryWidgetService
from widget_service.services.widget_base import WidgetService

logger = logging.getLogger(__name__)


def build_widget_service(config: Optional[Settings] = None) -> WidgetService:
    """
    Construct the configured backend.

    Raises:
        ConfigurationError: `widget_backend` names no known backend. Settings
            validation normally rejects such values first; this covers
            Settings objects built with model_construct().
    """
    config = config or settings

    if config.widget_backend == BACKEND_MEMORY:
        service: WidgetService = InMemoryWidgetService(
            delete_missing_policy=config.delete_missing_policy,
        )
    elif config.widget_backend == BACKEND_COSMOS:
        service = CosmosWidgetService(
            endpoint=config.cosmos_db_endpoint,
            key=config.cosmos_db_key,
            database_id=config.cosmos_db_database_id,
            container_id=config.cosmos_db_container_id,
            partition_key_mode=config.cosmos_partition_key_mode,
            error_detail=config.cosmos_error_detail,
            delete_missing_policy=config.delete_missing_policy,
        )
    else:
        raise ConfigurationError(
            message=f"Unknown widget backend '{config.widget_backend}'",
            context={"widget_backend": config.widget_backend},
        )

    logger.info(
        "Widget backend: %s (delete_missing_policy=%s)",
        service.name,
        service.delete_missing_policy,
    )
    return service
