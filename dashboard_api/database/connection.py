"""
Database Connection Management

Lazily establishes one pooled async engine to the analytical store.
Two configuration sources are tried in order (discrete credentials, then
DATABASE_URL), each verified with a live SELECT 1 before it is accepted.
"""

import asyncio
import time
from typing import Any, Callable, Dict, List, Optional, Tuple

import structlog
from sqlalchemy import event, text
from sqlalchemy.engine import URL
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from dashboard_api.config import DatabaseSettings
from dashboard_api.database.exceptions import DatabaseConnectionError

logger = structlog.get_logger(__name__)

EngineFactory = Callable[..., AsyncEngine]

SOURCE_CREDENTIALS = "credentials"
SOURCE_DATABASE_URL = "database_url"


def _log_engine_error(context) -> None:
    logger.error(
        "Database driver error",
        error=str(context.original_exception),
        error_type=type(context.original_exception).__name__,
    )


def _log_connection_invalidated(dbapi_connection, connection_record, exception) -> None:
    logger.warning(
        "Pooled connection invalidated",
        error=str(exception) if exception is not None else None,
    )


class ConnectionManager:
    """
    Owns the process-wide engine for the analytical store.

    The first successful source wins and is kept until close(). If every
    source fails, the failure is kept as well: later calls re-raise it
    without another attempt.

    Example:
        connections = ConnectionManager(settings.database)
        engine = await connections.get_connection()
    """

    def __init__(
        self,
        settings: DatabaseSettings,
        engine_factory: EngineFactory = create_async_engine,
    ):
        self._settings = settings
        self._engine_factory = engine_factory
        self._engine: Optional[AsyncEngine] = None
        self._failure: Optional[DatabaseConnectionError] = None
        self._lock = asyncio.Lock()
        self.source: Optional[str] = None

    @property
    def settings(self) -> DatabaseSettings:
        return self._settings

    async def get_connection(self) -> AsyncEngine:
        """
        Get the shared engine, connecting on first use.

        Raises:
            DatabaseConnectionError: If both sources failed, now or earlier
        """
        if self._engine is not None:
            return self._engine
        if self._failure is not None:
            raise self._failure

        async with self._lock:
            if self._engine is not None:
                return self._engine
            if self._failure is not None:
                raise self._failure

            causes: List[str] = []
            for source, url, unavailable in self._sources():
                if url is None:
                    causes.append(f"{source}: {unavailable}")
                    continue
                try:
                    engine = await self._connect(url)
                except Exception as e:
                    logger.warning(
                        "Database connection source failed",
                        source=source,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    causes.append(f"{source}: {e}")
                    continue

                self._register_listeners(engine)
                self._engine = engine
                self.source = source
                logger.info(
                    "Database connection established",
                    source=source,
                    host=url.host,
                    database=url.database,
                )
                return engine

            self._failure = DatabaseConnectionError(causes)
            logger.error("All database connection sources failed", causes=causes)
            raise self._failure

    def _sources(self) -> List[Tuple[str, Optional[URL], Optional[str]]]:
        """Connection sources in priority order, each with its URL or the reason it is unusable."""
        sources = []

        credentials_url = self._settings.credentials_url()
        if credentials_url is None:
            sources.append((SOURCE_CREDENTIALS, None, "incomplete configuration"))
        else:
            sources.append((SOURCE_CREDENTIALS, credentials_url, None))

        try:
            connection_string_url = self._settings.connection_string_url()
        except Exception as e:
            sources.append((SOURCE_DATABASE_URL, None, str(e)))
        else:
            if connection_string_url is None:
                sources.append((SOURCE_DATABASE_URL, None, "not configured"))
            else:
                sources.append((SOURCE_DATABASE_URL, connection_string_url, None))

        return sources

    async def _connect(self, url: URL) -> AsyncEngine:
        engine = self._engine_factory(url, **self._engine_options())
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except Exception:
            await engine.dispose()
            raise
        return engine

    def _engine_options(self) -> Dict[str, Any]:
        s = self._settings
        return {
            "echo": s.echo,
            "pool_size": s.pool_size,
            "max_overflow": s.max_overflow,
            "pool_timeout": s.pool_timeout,
            "pool_pre_ping": True,
            "connect_args": {
                "timeout": s.connect_timeout,
                "command_timeout": s.statement_timeout,
                "server_settings": {"statement_timeout": str(int(s.statement_timeout * 1000))},
            },
        }

    @staticmethod
    def _register_listeners(engine: AsyncEngine) -> None:
        event.listen(engine.sync_engine, "handle_error", _log_engine_error)
        event.listen(engine.sync_engine.pool, "invalidate", _log_connection_invalidated)

    async def check_health(self) -> Dict[str, Any]:
        """
        Check that the store answers a query.

        Returns:
            dict: Health status with latency information
        """
        try:
            start = time.perf_counter()
            engine = await self.get_connection()
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            latency_ms = (time.perf_counter() - start) * 1000

            return {
                "status": "healthy",
                "latency_ms": round(latency_ms, 2),
                "source": self.source,
            }
        except Exception as e:
            logger.error("Database health check failed", error=str(e))
            return {
                "status": "unhealthy",
                "error": str(e),
            }

    async def test_connection(self) -> bool:
        return (await self.check_health())["status"] == "healthy"

    async def close(self) -> None:
        """Dispose the pool at shutdown."""
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self.source = None
            logger.info("Database connection pool closed")
