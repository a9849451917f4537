"""Pytest configuration and shared fixtures"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from sensor_telemetry.app import create_app
from sensor_telemetry.app_settings import AppSettings
from sensor_telemetry.repos.sensor_data_repo import SensorDataRepository

BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
BASE_MS = 1704110400000  # BASE_TIME in epoch ms


class FakeStoreClient:
    """In-memory stand-in for InfluxDBStoreClient.

    Records every Flux query and replays canned pivoted rows.
    """

    def __init__(self, rows=None, error=None, bucket="Temperature", measurement="aht10"):
        self.rows = rows or []
        self.error = error
        self.bucket = bucket
        self.measurement = measurement
        self.queries = []
        self.connected = False

    async def connect(self):
        self.connected = True

    async def _execute(self, query):
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return [dict(row) for row in self.rows]

    async def health_check(self):
        return self.connected

    async def close(self):
        self.connected = False


def make_row(minute=0, **fields):
    """A pivoted Flux row at BASE_TIME + `minute` minutes."""
    row = {
        "result": "mean",
        "table": 0,
        "_start": BASE_TIME - timedelta(hours=1),
        "_stop": BASE_TIME + timedelta(hours=1),
        "_time": BASE_TIME + timedelta(minutes=minute),
        "_measurement": "aht10",
    }
    row.update(fields)
    return row


@pytest.fixture
def fake_store():
    return FakeStoreClient()


@pytest.fixture
def repo(fake_store):
    return SensorDataRepository(fake_store, current_lookback_ms=86_400_000)


@pytest.fixture
def test_settings(tmp_path):
    return AppSettings(
        http_password="secret",
        warmup_on_startup=False,
        static_dir=str(tmp_path / "missing-static"),
    )


@pytest.fixture
def api_client(test_settings, fake_store):
    """TestClient running the app lifespan against the fake store"""
    app = create_app(test_settings, store_client=fake_store)
    with TestClient(app) as client:
        yield client


@pytest.fixture
def auth_headers():
    return {"Authorization": "Bearer secret"}
