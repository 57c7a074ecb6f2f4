"""
Dashboard Analytics API
Centralized Configuration Management

Configuration is loaded from environment variables (and an optional .env
file) with Pydantic settings, grouped into one section per subsystem.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL, make_url

ASYNC_DRIVER = "postgresql+asyncpg"

# Every section reads the same dotenv file as the top-level settings
ENV_FILE = ".env"


def _strip_quotes(value: Any) -> Any:
    """Remove one pair of matching surrounding quotes from a raw env value."""
    if not isinstance(value, str):
        return value
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1].strip()
    return value or None


class DatabaseSettings(BaseSettings):
    """
    TimescaleDB Connection Configuration

    Two sources are supported: five discrete TIMESCALEDB_* variables, or a
    single DATABASE_URL connection string. Missing values stay None so the
    connection manager can tell an incomplete source from a broken one.
    """

    model_config = SettingsConfigDict(
        env_prefix="TIMESCALEDB_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )

    host: Optional[str] = Field(default=None, description="Database host")
    port: Optional[int] = Field(default=None, description="Database port")
    database: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TIMESCALEDB_DATABASE", "TIMESCALEDB_NAME", "database"),
        description="Database name",
    )
    user: Optional[str] = Field(default=None, description="Database user")
    password: Optional[SecretStr] = Field(default=None, description="Database password")
    url: Optional[SecretStr] = Field(
        default=None,
        validation_alias=AliasChoices("DATABASE_URL", "url"),
        description="Connection string used when discrete credentials fail",
    )

    pool_size: int = Field(default=20, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Max overflow connections")
    pool_timeout: int = Field(default=30, description="Pool checkout timeout in seconds")
    connect_timeout: float = Field(default=5.0, description="Connect timeout in seconds")
    statement_timeout: float = Field(default=30.0, description="Per-statement timeout in seconds")
    ssl: bool = Field(default=False, description="Require SSL for discrete credentials")
    echo: bool = Field(default=False, description="Echo SQL queries")

    @field_validator("host", "port", "database", "user", "password", "url", mode="before")
    @classmethod
    def unquote(cls, v: Any) -> Any:
        """Values copied from .env files are often wrapped in quotes"""
        return _strip_quotes(v)

    def credentials_url(self) -> Optional[URL]:
        """asyncpg URL built from the discrete variables, or None if incomplete"""
        if not all([self.host, self.port, self.database, self.user, self.password]):
            return None
        url = URL.create(
            ASYNC_DRIVER,
            username=self.user,
            password=self.password.get_secret_value(),
            host=self.host,
            port=self.port,
            database=self.database,
        )
        if self.ssl:
            url = url.update_query_dict({"ssl": "require"})
        return url

    def connection_string_url(self) -> Optional[URL]:
        """DATABASE_URL rewritten for the asyncpg driver, or None if unset"""
        if self.url is None:
            return None
        url = make_url(self.url.get_secret_value())
        if url.drivername.split("+")[0] in ("postgres", "postgresql"):
            url = url.set(drivername=ASYNC_DRIVER)
        # asyncpg takes "ssl", libpq-style strings carry "sslmode"
        sslmode = url.query.get("sslmode")
        if sslmode:
            url = url.difference_update_query(["sslmode"]).update_query_dict({"ssl": sslmode})
        return url

    def masked_environment(self) -> Dict[str, Any]:
        """Presence flags for every variable plus a truncated host. No secrets."""
        return {
            "hasHost": self.host is not None,
            "hasPort": self.port is not None,
            "hasDatabase": self.database is not None,
            "hasUser": self.user is not None,
            "hasPassword": self.password is not None,
            "hasDatabaseUrl": self.url is not None,
            "host": f"{self.host[:20]}..." if self.host else None,
        }


class ReportSettings(BaseSettings):
    """Report Aggregation Configuration"""

    model_config = SettingsConfigDict(
        env_prefix="REPORT_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    comparison_lag_days: int = Field(
        default=7,
        ge=0,
        description="Days the comparison window is shifted back from the requested range",
    )
    default_sku_id: str = Field(default="ID140001", description="SKU served when none is requested")
    sku_window_days: int = Field(default=7, ge=1, description="Trailing window for SKU detail")
    new_customer_window_days: int = Field(
        default=30,
        ge=1,
        description="Users created within this many days of the range end count as new",
    )


class SecuritySettings(BaseSettings):
    """HTTP Security Configuration"""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        alias="CORS_ORIGINS",
        description="Allowed CORS origins",
    )


class MonitoringSettings(BaseSettings):
    """Logging and Metrics Configuration"""

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", alias="LOG_LEVEL", description="Logging level")
    log_format: str = Field(default="json", alias="LOG_FORMAT", description="Log format: json or console")
    metrics_enabled: bool = Field(default=True, alias="METRICS_ENABLED", description="Expose /api/metrics")


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_name: str = Field(default="dashboard-analytics-api", alias="APP_NAME", description="Application name")
    app_env: str = Field(default="development", alias="APP_ENV", description="Environment")
    debug: bool = Field(default=False, alias="DEBUG", description="Debug mode")

    # API Server
    api_host: str = Field(default="0.0.0.0", alias="API_HOST", description="API host")
    api_port: int = Field(default=8000, alias="API_PORT", description="API port")
    api_workers: int = Field(default=4, alias="API_WORKERS", description="API workers")

    version: str = Field(default="1.0.0", description="Application version")

    # Subsystem configurations
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    reports: ReportSettings = Field(default_factory=ReportSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def is_development(self) -> bool:
        return self.app_env == "development"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Settings are read from the environment once per process.
    """
    return Settings()
