"""
Test Suite Configuration
"""
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from dashboard_api.config import DatabaseSettings, Settings, get_settings
from dashboard_api.database import ConnectionManager
from dashboard_api.reports import DataService, DateRange
from dashboard_api.serving.api import create_api_app

ENV_VARS = (
    "TIMESCALEDB_HOST",
    "TIMESCALEDB_PORT",
    "TIMESCALEDB_DATABASE",
    "TIMESCALEDB_NAME",
    "TIMESCALEDB_USER",
    "TIMESCALEDB_PASSWORD",
    "TIMESCALEDB_SSL",
    "DATABASE_URL",
    "REPORT_COMPARISON_LAG_DAYS",
    "REPORT_DEFAULT_SKU_ID",
    "APP_ENV",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "METRICS_ENABLED",
    "CORS_ORIGINS",
)

SAMPLE_START = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
SAMPLE_END = datetime(2025, 1, 7, 23, 59, 59, tzinfo=timezone.utc)
SAMPLE_QUERY = {"from": "2025-01-01T00:00:00Z", "to": "2025-01-07T23:59:59Z"}


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate every test from settings in the host environment and any local .env file"""
    monkeypatch.chdir(tmp_path)
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class FakeExecutor:
    """
    Query executor double keyed by query name.

    A response is a list of rows, a callable taking the bound parameters and
    returning rows, or an exception instance to raise. Unknown queries return
    no rows.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.responses = dict(responses or {})
        self.error = error
        self.calls: List[tuple] = []

    async def run_query(
        self,
        sql: str,
        params: Optional[Mapping[str, Any]] = None,
        *,
        name: str = "query",
    ) -> List[Dict[str, Any]]:
        bound = dict(params or {})
        self.calls.append((name, bound))
        if self.error is not None:
            raise self.error

        response = self.responses.get(name, [])
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(bound)
        return [dict(row) for row in response]

    def params_for(self, name: str) -> List[Dict[str, Any]]:
        return [params for query, params in self.calls if query == name]


def by_window(current: List[dict], previous: List[dict]) -> Callable[[dict], List[dict]]:
    """Response that depends on whether the sample range or its comparison window is bound"""

    def respond(params: dict) -> List[dict]:
        return current if params.get("start") == SAMPLE_START else previous

    return respond


@pytest.fixture
def date_range() -> DateRange:
    return DateRange(SAMPLE_START, SAMPLE_END)


@pytest.fixture
def fake_executor() -> FakeExecutor:
    return FakeExecutor()


@pytest.fixture
def service(fake_executor) -> DataService:
    return DataService(fake_executor)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no reachable database"""
    return Settings(app_env="testing", database=DatabaseSettings())


@pytest.fixture
def app(test_settings):
    return create_api_app(settings=test_settings, connections=ConnectionManager(test_settings.database))


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
