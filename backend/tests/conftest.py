from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from gridguard.config import Settings
from gridguard.main import create_app
from gridguard.services.log_store import LogStore
from gridguard.services.protection_engine import ProtectionEngine
from gridguard.services.protection_store import ProtectionStore

API_KEY = "test-secret"


class FrozenClock:
    """Callable clock that tests can move forward."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock():
    return FrozenClock(datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def protection_store(tmp_path):
    return ProtectionStore(tmp_path / "autoProtect.json")


@pytest.fixture
def log_store(tmp_path, clock):
    return LogStore(tmp_path / "logs.json", clock=clock)


@pytest.fixture
def engine(protection_store, log_store, clock):
    return ProtectionEngine(protection_store, log_store, clock=clock)


def make_settings(tmp_path, **overrides) -> Settings:
    values = {
        "DATA_DIR": str(tmp_path),
        "PROTECT_API_KEY": API_KEY,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def app(tmp_path):
    return create_app(make_settings(tmp_path))


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def auth():
    return {"x-api-key": API_KEY}
