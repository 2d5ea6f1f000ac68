import threading
import time
from unittest.mock import MagicMock, patch

import pytest

from complipilot.core import database
from complipilot.core.config import settings


@pytest.fixture(autouse=True)
def _fresh_engine():
    database.close_engine()
    yield
    database.close_engine()


def test_concurrent_first_use_builds_one_engine():
    created = []

    def slow_create_engine(url, **kwargs):
        time.sleep(0.05)
        engine = MagicMock(name="engine")
        created.append(engine)
        return engine

    barrier = threading.Barrier(4)
    seen = []

    def worker():
        barrier.wait()
        seen.append(database.get_engine())

    with patch("complipilot.core.database.create_engine", side_effect=slow_create_engine):
        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert len(created) == 1
    assert len(seen) == 4
    assert all(engine is created[0] for engine in seen)


def test_engine_is_reused_across_calls():
    assert database.get_engine() is database.get_engine()
    assert database.ping() == "sqlite"


def test_init_engine_replaces_existing_engine():
    first = database.get_engine()
    second = database.init_engine("sqlite://")
    assert second is not first
    assert database.get_engine() is second
    assert database.ping() == "sqlite"


def test_missing_database_url(monkeypatch):
    monkeypatch.delenv("TEST_DATABASE_URL", raising=False)
    monkeypatch.setattr(settings, "TEST_DATABASE_URL", None)
    monkeypatch.setattr(settings, "DATABASE_URL", None)
    with pytest.raises(ValueError, match="DATABASE_URL is not configured"):
        database.get_engine()
