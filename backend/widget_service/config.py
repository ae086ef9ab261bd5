"""
Widget Service - Application Configuration
==========================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or a .env file),
       validates types and enumerations, and exposes a `settings` singleton.
Who:   Imported by the application factory and the backend factory.
When:  Loaded once at module import time. Backends copy the values they need
       at construction and never re-read them.

Environment variable names are the upper-cased field names
(COSMOS_DB_ENDPOINT, COSMOS_DB_KEY, COSMOS_DB_DATABASE_ID, ...).
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


BACKEND_MEMORY = "memory"
BACKEND_COSMOS = "cosmos"

PARTITION_KEY_ID = "id"
PARTITION_KEY_NONE = "none"

DELETE_MISSING_NOT_FOUND = "not_found"
DELETE_MISSING_IDEMPOTENT = "idempotent"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Every value has a default so the service starts with the in-memory
    backend and no other configuration. Selecting the Cosmos backend without
    an endpoint or key is allowed; the first operation then fails with a
    500 result instead of the process failing at startup.
    """

    # ── Storage Backend ───────────────────────────────────────────────────
    # Which WidgetService implementation the factory constructs.
    widget_backend: str = Field(default=BACKEND_MEMORY)

    # What to do when delete targets an id that does not exist.
    # not_found: 404 result. idempotent: the "deleted" marker is returned anyway.
    delete_missing_policy: str = Field(default=DELETE_MISSING_NOT_FOUND)

    # ── Azure Cosmos DB ───────────────────────────────────────────────────
    cosmos_db_endpoint: str = Field(default="", description="Cosmos DB account URL")
    cosmos_db_key: str = Field(default="", description="Cosmos DB account key")
    cosmos_db_database_id: str = Field(default="WidgetsDb")
    cosmos_db_container_id: str = Field(default="Widgets")

    # id:   partition key value equals the widget id
    # none: container has no partition key; items are addressed by id only
    cosmos_partition_key_mode: str = Field(default=PARTITION_KEY_ID)

    # When False, 500 messages are generic ("Error retrieving widget") and the
    # backend's own error text is only logged.
    cosmos_error_detail: bool = Field(default=True)

    # ── API Documentation ─────────────────────────────────────────────────
    # Optional pre-generated OpenAPI document (YAML or JSON). Read once at
    # startup; when empty, FastAPI's generated schema is served.
    openapi_spec_path: str = Field(default="")
    docs_url: str = Field(default="/api-docs")

    # ── CORS ──────────────────────────────────────────────────────────────
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8080, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("widget_backend")
    @classmethod
    def validate_widget_backend(cls, v: str) -> str:
        valid = {BACKEND_MEMORY, BACKEND_COSMOS}
        lower = v.strip().lower()
        if lower not in valid:
            raise ValueError(f"Invalid widget_backend '{v}'. Must be one of: {valid}")
        return lower

    @field_validator("cosmos_partition_key_mode")
    @classmethod
    def validate_partition_key_mode(cls, v: str) -> str:
        valid = {PARTITION_KEY_ID, PARTITION_KEY_NONE}
        lower = v.strip().lower()
        if lower not in valid:
            raise ValueError(
                f"Invalid cosmos_partition_key_mode '{v}'. Must be one of: {valid}"
            )
        return lower

    @field_validator("delete_missing_policy")
    @classmethod
    def validate_delete_missing_policy(cls, v: str) -> str:
        valid = {DELETE_MISSING_NOT_FOUND, DELETE_MISSING_IDEMPOTENT}
        lower = v.strip().lower()
        if lower not in valid:
            raise ValueError(
                f"Invalid delete_missing_policy '{v}'. Must be one of: {valid}"
            )
        return lower

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # COSMOS_DB_KEY and cosmos_db_key both work
    }

    def validate_backend_configuration(self) -> None:
        """
        What:  Checks that the selected backend has what it needs to connect.
        When:  Called during app startup (lifespan).
        How:   Collects every problem and raises one ValueError listing them.
        """
        errors = []
        if self.widget_backend == BACKEND_COSMOS:
            if not self.cosmos_db_endpoint:
                errors.append("COSMOS_DB_ENDPOINT is not set.")
            if not self.cosmos_db_key:
                errors.append("COSMOS_DB_KEY is not set.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported by the application factory
settings = Settings()
