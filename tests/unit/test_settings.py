"""
Unit Tests - Configuration
"""
import pytest
from pydantic import ValidationError

from dashboard_api.config import DatabaseSettings, ReportSettings, Settings


def full_credentials(**overrides) -> DatabaseSettings:
    values = dict(host="db.internal", port=5432, database="analytics", user="reader", password="s3cret")
    values.update(overrides)
    return DatabaseSettings(**values)


class TestDatabaseSettings:
    """Tests for database connection sources"""

    def test_reads_prefixed_environment(self, monkeypatch):
        monkeypatch.setenv("TIMESCALEDB_HOST", "db.internal")
        monkeypatch.setenv("TIMESCALEDB_PORT", "6543")

        settings = DatabaseSettings()

        assert settings.host == "db.internal"
        assert settings.port == 6543

    def test_strips_surrounding_quotes(self, monkeypatch):
        monkeypatch.setenv("TIMESCALEDB_HOST", '"db.internal"')
        monkeypatch.setenv("TIMESCALEDB_PORT", "'5432'")
        monkeypatch.setenv("TIMESCALEDB_PASSWORD", "'s3cret'")

        settings = DatabaseSettings()

        assert settings.host == "db.internal"
        assert settings.port == 5432
        assert settings.password.get_secret_value() == "s3cret"

    def test_name_is_accepted_for_database(self, monkeypatch):
        monkeypatch.setenv("TIMESCALEDB_NAME", "analytics")

        assert DatabaseSettings().database == "analytics"

    def test_empty_quoted_value_is_missing(self, monkeypatch):
        monkeypatch.setenv("TIMESCALEDB_HOST", '""')

        assert DatabaseSettings().host is None

    def test_credentials_url(self):
        url = full_credentials().credentials_url()

        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "db.internal"
        assert url.port == 5432
        assert url.database == "analytics"
        assert url.username == "reader"
        assert url.password == "s3cret"

    def test_credentials_url_with_ssl(self):
        url = full_credentials(ssl=True).credentials_url()

        assert url.query["ssl"] == "require"

    def test_incomplete_credentials(self):
        assert full_credentials(password=None).credentials_url() is None
        assert DatabaseSettings(host="db.internal").credentials_url() is None

    def test_connection_string_is_rewritten_for_asyncpg(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgres://reader:pw@cloud.example.com:5432/tsdb?sslmode=require")

        url = DatabaseSettings().connection_string_url()

        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "cloud.example.com"
        assert url.database == "tsdb"
        assert url.query == {"ssl": "require"}

    def test_connection_string_not_configured(self):
        assert DatabaseSettings().connection_string_url() is None

    def test_masked_environment_hides_secrets(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "postgresql://reader:pw@cloud.example.com/tsdb")
        settings = full_credentials(host="analytics-primary.eu-west-1.example.com")

        masked = settings.masked_environment()

        assert masked == {
            "hasHost": True,
            "hasPort": True,
            "hasDatabase": True,
            "hasUser": True,
            "hasPassword": True,
            "hasDatabaseUrl": True,
            "host": "analytics-primary.eu...",
        }
        assert "s3cret" not in str(masked)

    def test_masked_environment_when_unconfigured(self):
        masked = DatabaseSettings().masked_environment()

        assert not any(value for key, value in masked.items() if key.startswith("has"))
        assert masked["host"] is None


class TestReportSettings:
    """Tests for report defaults"""

    def test_defaults(self):
        settings = ReportSettings()

        assert settings.comparison_lag_days == 7
        assert settings.default_sku_id == "ID140001"
        assert settings.sku_window_days == 7

    def test_lag_from_environment(self, monkeypatch):
        monkeypatch.setenv("REPORT_COMPARISON_LAG_DAYS", "14")

        assert ReportSettings().comparison_lag_days == 14

    def test_negative_lag_rejected(self):
        with pytest.raises(ValidationError):
            ReportSettings(comparison_lag_days=-1)


class TestSettings:
    """Tests for application settings"""

    def test_environment_is_normalized(self):
        assert Settings(app_env="Production").is_production

    def test_invalid_environment(self):
        with pytest.raises(ValidationError):
            Settings(app_env="qa")


class TestDotenvFile:
    """Every settings section reads the working directory's .env file"""

    def write_env(self, directory, content):
        (directory / ".env").write_text(content, encoding="utf-8")

    def test_sections_read_dotenv(self, tmp_path):
        self.write_env(
            tmp_path,
            "\n".join(
                [
                    'TIMESCALEDB_HOST="db.internal"',
                    "TIMESCALEDB_PORT=5432",
                    "TIMESCALEDB_NAME=analytics",
                    "TIMESCALEDB_USER='\"reader\"'",
                    "TIMESCALEDB_PASSWORD=s3cret",
                    "DATABASE_URL=postgres://reader:pw@cloud.example.com:5432/tsdb",
                    "REPORT_DEFAULT_SKU_ID=ID150002",
                    "LOG_FORMAT=console",
                    "APP_ENV=staging",
                ]
            ),
        )

        settings = Settings()

        assert settings.app_env == "staging"
        assert settings.database.host == "db.internal"
        assert settings.database.port == 5432
        assert settings.database.database == "analytics"
        assert settings.database.user == "reader"
        assert settings.database.credentials_url() is not None
        assert settings.database.connection_string_url().host == "cloud.example.com"
        assert settings.reports.default_sku_id == "ID150002"
        assert settings.monitoring.log_format == "console"

    def test_environment_overrides_dotenv(self, tmp_path, monkeypatch):
        self.write_env(tmp_path, "TIMESCALEDB_HOST=from-dotenv\n")
        monkeypatch.setenv("TIMESCALEDB_HOST", "from-environment")

        assert DatabaseSettings().host == "from-environment"
