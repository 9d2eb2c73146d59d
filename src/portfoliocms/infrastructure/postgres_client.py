"""PostgreSQL client for the document collections."""

from collections.abc import Generator, Iterable
from contextlib import asynccontextmanager, contextmanager
from typing import Any

import psycopg
from loguru import logger
from psycopg import sql
from psycopg_pool import ConnectionPool

from portfoliocms.infrastructure.settings import Settings, get_settings


class PostgresClientWrapper:
    """Wrapper for the PostgreSQL connection pool and schema setup."""

    def __init__(self, settings: Settings | None = None):
        """Initialize PostgreSQL client wrapper."""
        self.settings = settings or get_settings()
        self._pool: ConnectionPool | None = None

    def connect(self) -> ConnectionPool:
        """Open the connection pool."""
        if self._pool is None:
            logger.info(f"Connecting to PostgreSQL at {self.settings.postgres_host}:{self.settings.postgres_port}")
            self._pool = ConnectionPool(
                self.settings.postgres_dsn,
                min_size=self.settings.postgres_pool_min_size,
                max_size=self.settings.postgres_pool_max_size,
                open=True,
            )
            logger.info("PostgreSQL connection pool ready")
        return self._pool

    def disconnect(self) -> None:
        """Close the connection pool."""
        if self._pool is not None:
            self._pool.close()
            self._pool = None
            logger.info("PostgreSQL connection pool closed")

    @contextmanager
    def connection(self) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a pooled connection; committed on clean exit, rolled back on error."""
        pool = self._pool or self.connect()
        with pool.connection() as conn:
            yield conn

    def setup_schema(self, collections: Iterable[tuple[str, Iterable[str]]]) -> None:
        """Create one JSONB table per collection plus unique indexes.

        ``collections`` yields ``(table, unique_fields)`` pairs.
        """
        with self.connection() as conn:
            with conn.cursor() as cur:
                for table, unique_fields in collections:
                    cur.execute(
                        sql.SQL(
                            """
                            CREATE TABLE IF NOT EXISTS {table} (
                                id UUID PRIMARY KEY,
                                data JSONB NOT NULL DEFAULT '{{}}'::jsonb,
                                created_at TIMESTAMP WITH TIME ZONE NOT NULL,
                                updated_at TIMESTAMP WITH TIME ZONE NOT NULL
                            )
                            """
                        ).format(table=sql.Identifier(table))
                    )
                    for field_name in unique_fields:
                        cur.execute(
                            sql.SQL("CREATE UNIQUE INDEX IF NOT EXISTS {index} ON {table} ((data->>{field}))").format(
                                index=sql.Identifier(f"{table}_{field_name}_key"),
                                table=sql.Identifier(table),
                                field=sql.Literal(field_name),
                            )
                        )
        logger.info("Database schema setup complete")


# Singleton instance
_postgres_client: PostgresClientWrapper | None = None


def get_postgres_client() -> PostgresClientWrapper:
    """Get singleton PostgreSQL client instance."""
    global _postgres_client
    if _postgres_client is None:
        _postgres_client = PostgresClientWrapper()
    return _postgres_client


@asynccontextmanager
async def postgres_lifespan():
    """Async context manager for PostgreSQL connection lifecycle."""
    client = get_postgres_client()
    client.connect()
    try:
        yield client
    finally:
        client.disconnect()
