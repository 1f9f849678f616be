"""Shared fixtures: in-memory SQLite, ASGI client, stub LLM and redis"""

import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RATE_LIMIT_BACKEND"] = "memory"
os.environ["OPENAI_API_KEY"] = "test-key"
os.environ["DEBUG"] = "true"
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""

from datetime import datetime, timedelta
from fnmatch import fnmatch
from typing import List, Optional

import pytest
from httpx import ASGITransport, AsyncClient

from sayitright.core.database import async_session_maker, engine, init_db
from sayitright.core.redis import get_redis
from sayitright.core.security import create_access_token, hash_password
from sayitright.main import app
from sayitright.middleware.endpoint_limit import endpoint_store
from sayitright.middleware.rate_limit import guest_rate_limiter
from sayitright.models.user import Subscription, User
from sayitright.services.llm_client import LLMCompletion, get_llm_client


class StubLLMClient:
    """Records prompts and returns a canned reply"""

    def __init__(self, reply: str = "안녕하세요 교수님,\n\n정리된 이메일입니다.", tokens_used: int = 42):
        self.reply = reply
        self.tokens_used = tokens_used
        self.error: Optional[Exception] = None
        self.calls: List[dict] = []

    async def complete(self, system: str, user: str, max_tokens: int) -> LLMCompletion:
        self.calls.append({"system": system, "user": user, "max_tokens": max_tokens})
        if self.error:
            raise self.error
        return LLMCompletion(content=self.reply, tokens_used=self.tokens_used)


class FakeRedis:
    """The handful of redis commands the auth service uses"""

    def __init__(self):
        self.store = {}

    async def set(self, key, value, ex=None):
        self.store[key] = value
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def scan_iter(self, match="*"):
        for key in list(self.store):
            if fnmatch(key, match):
                yield key


@pytest.fixture(autouse=True)
async def database():
    """Fresh schema per test; disposing drops the in-memory database"""
    await init_db()
    yield
    await engine.dispose()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    guest_rate_limiter.store.records.clear()
    endpoint_store.records.clear()
    yield


@pytest.fixture
async def db_session():
    async with async_session_maker() as session:
        yield session


@pytest.fixture
def llm_stub():
    return StubLLMClient()


@pytest.fixture
def fake_redis():
    return FakeRedis()


@pytest.fixture
async def client(llm_stub, fake_redis):
    async def override_redis():
        return fake_redis

    app.dependency_overrides[get_llm_client] = lambda: llm_stub
    app.dependency_overrides[get_redis] = override_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Create a user; ``subscribed`` adds a subscription active right now"""

    async def _make_user(
        email: str = "user@example.com",
        password: str = "password123",
        credit_balance: int = 0,
        subscribed: bool = False,
        tier: str = "free",
    ) -> User:
        user = User(
            email=email,
            password_hash=hash_password(password),
            username="tester",
            credit_balance=credit_balance,
            tier=tier,
        )
        db_session.add(user)
        await db_session.flush()

        if subscribed:
            now = datetime.utcnow()
            db_session.add(Subscription(
                user_id=user.id,
                status="active",
                start_at=now - timedelta(days=1),
                end_at=now + timedelta(days=29),
            ))

        await db_session.commit()
        await db_session.refresh(user, attribute_names=["subscriptions"])
        return user

    return _make_user


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.email)}"}
