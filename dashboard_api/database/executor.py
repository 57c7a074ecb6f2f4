"""
Query Executor

Runs parameterized SQL through the shared engine with timing
instrumentation. A pure pass-through: no retries, no statement caching.
"""

import time
from typing import Any, Dict, List, Mapping, Optional

import structlog
from sqlalchemy import text

from dashboard_api.database.connection import ConnectionManager
from dashboard_api.database.exceptions import QueryError
from dashboard_api.serving.metrics import DB_QUERY_DURATION

logger = structlog.get_logger(__name__)


class QueryExecutor:
    """Executes read-only statements on pooled connections."""

    def __init__(self, connections: ConnectionManager):
        self._connections = connections

    async def run_query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        name: str = "query",
    ) -> List[Dict[str, Any]]:
        """
        Execute a statement and return its rows as dicts.

        Args:
            sql: SQL with named bind parameters (:start, :end, ...)
            params: Bind parameter values
            name: Label used in logs and metrics

        Returns:
            List of row dicts keyed by column label

        Raises:
            QueryError: If the statement fails
            DatabaseConnectionError: If no connection can be established
        """
        # Timed from before engine acquisition so a first-use connect is included
        start = time.perf_counter()
        engine = await self._connections.get_connection()

        try:
            async with engine.connect() as conn:
                result = await conn.execute(text(sql), dict(params or {}))
                rows = [dict(row) for row in result.mappings().all()]
        except Exception as e:
            duration = time.perf_counter() - start
            DB_QUERY_DURATION.labels(query_name=name).observe(duration)
            logger.error(
                "Query failed",
                query=name,
                duration_ms=round(duration * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise QueryError(name, str(e)) from e

        duration = time.perf_counter() - start
        DB_QUERY_DURATION.labels(query_name=name).observe(duration)
        logger.debug(
            "Query executed",
            query=name,
            duration_ms=round(duration * 1000, 2),
            rows=len(rows),
        )
        return rows
