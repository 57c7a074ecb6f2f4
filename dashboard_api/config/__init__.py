"""
Dashboard Analytics API
Configuration Module
"""
from .settings import DatabaseSettings, ReportSettings, Settings, get_settings

__all__ = ["DatabaseSettings", "ReportSettings", "Settings", "get_settings"]
