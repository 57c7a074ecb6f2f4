"""
Database Module
"""
from .connection import ConnectionManager
from .exceptions import DatabaseConnectionError, DatabaseError, QueryError
from .executor import QueryExecutor

__all__ = [
    "ConnectionManager",
    "QueryExecutor",
    "DatabaseError",
    "DatabaseConnectionError",
    "QueryError",
]
