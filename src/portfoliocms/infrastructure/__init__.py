# src/portfoliocms/infrastructure/__init__.py
"""Infrastructure layer - external services, databases, and configuration."""

from portfoliocms.infrastructure.logs import configure_logging
from portfoliocms.infrastructure.postgres_client import (
    PostgresClientWrapper,
    get_postgres_client,
    postgres_lifespan,
)
from portfoliocms.infrastructure.settings import Settings, get_settings
from portfoliocms.infrastructure.wiring import build_orchestrator, get_orchestrator

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "configure_logging",
    # Postgres (document store)
    "PostgresClientWrapper",
    "get_postgres_client",
    "postgres_lifespan",
    # Mutation pipeline
    "build_orchestrator",
    "get_orchestrator",
]
