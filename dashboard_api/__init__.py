"""
Dashboard Analytics API

Read-only reporting layer serving aggregated dashboard reports
from a TimescaleDB analytical store.
"""

__version__ = "1.0.0"
