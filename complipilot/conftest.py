# complipilot/conftest.py
import asyncio
import os
import time
from types import SimpleNamespace

# Test environment must be in place before any complipilot import reads settings
os.environ.setdefault("ENV", "test")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite://")
os.environ.setdefault("SKIP_ENV_VALIDATION", "1")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-for-complipilot-suite")
os.environ.setdefault("SUPABASE_URL", "https://auth.test.local")
os.environ.setdefault("SUPABASE_ANON_KEY", "anon-test-key")
os.environ.setdefault("AUTO_CREATE_TABLES", "true")

import jwt
import pytest
from fastapi.testclient import TestClient

from complipilot.core.config import settings

TEST_JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


@pytest.fixture(scope="function")
def reset_db():
    """Drop and recreate all tables around each test that touches the database."""
    from complipilot.core.database import reset_database

    reset_database()
    yield
    reset_database()


@pytest.fixture
def db_session(reset_db):
    from complipilot.core.database import get_session_factory

    session = get_session_factory()()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(reset_db):
    from complipilot.main import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_token():
    """Mint a Supabase-style HS256 access token for a user id."""

    def _make(user_id: str, *, expires_in: int = 3600, audience: str = "authenticated") -> str:
        now = int(time.time())
        claims = {
            "sub": user_id,
            "aud": audience,
            "role": "authenticated",
            "iat": now,
            "exp": now + expires_in,
        }
        return jwt.encode(claims, TEST_JWT_SECRET, algorithm="HS256")

    return _make


@pytest.fixture
def auth_headers(make_token):
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {make_token(user_id)}"}

    return _headers


@pytest.fixture(autouse=True)
def _restore_settings():
    """Undo per-test tweaks to the shared settings object."""
    snapshot = settings.model_dump()
    yield
    for key, value in snapshot.items():
        setattr(settings, key, value)


@pytest.fixture(autouse=True)
def _reset_llm_client():
    from complipilot.features.generation import llm

    llm.set_client_for_tests(None)
    yield
    llm.set_client_for_tests(None)


@pytest.fixture(autouse=True)
def _reset_auth_transport():
    from complipilot.features.auth import client as auth_client

    auth_client.set_transport_for_tests(None)
    yield
    auth_client.set_transport_for_tests(None)


class FakeCompletions:
    """Stands in for groq.AsyncGroq().chat.completions."""

    def __init__(self, content: str = "", delay: float = 0.0, error: Exception = None):
        self.content = content
        self.delay = delay
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeLLMClient:
    def __init__(self, **kwargs):
        self.completions = FakeCompletions(**kwargs)
        self.chat = SimpleNamespace(completions=self.completions)


@pytest.fixture
def fake_llm():
    """Install a fake LLM client; call with content/delay/error to configure."""
    from complipilot.features.generation import llm

    def _install(content: str = "# Executive Summary\n\nGenerated.", **kwargs) -> FakeLLMClient:
        client = FakeLLMClient(content=content, **kwargs)
        llm.set_client_for_tests(client)
        return client

    return _install
