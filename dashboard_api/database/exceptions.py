"""
Database Errors

Failures raised by the connection manager and query executor.
"""

from typing import List


class DatabaseError(Exception):
    """Base class for analytical store failures."""


class DatabaseConnectionError(DatabaseError):
    """Every configured connection source failed its live connection check."""

    def __init__(self, causes: List[str]):
        self.causes = list(causes)
        super().__init__("Unable to connect to the analytical store: " + "; ".join(self.causes))


class QueryError(DatabaseError):
    """A single statement failed. Fatal to one report, never to the process."""

    def __init__(self, query_name: str, message: str):
        self.query_name = query_name
        self.message = message
        super().__init__(f"Query '{query_name}' failed: {message}")
