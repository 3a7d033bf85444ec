"""
Pytest configuration and fixtures for the Idea-HUB backend tests.

Settings are read at import time, so the environment is prepared before any
ideahub module is imported.
"""
import hashlib
import hmac
import json
import os
import time

os.environ["DB_URL"] = "sqlite+aiosqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-secret-key"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_dummy"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_secret"
os.environ["FRONTEND_URL"] = "http://frontend.test"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from ideahub.db.models import Base, Idea, User
from ideahub.db.session import get_db
from ideahub.main import app
from ideahub.utils.auth import create_token_pair

WEBHOOK_SECRET = os.environ["STRIPE_WEBHOOK_SECRET"]


@pytest.fixture
async def engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def fetch(session_factory):
    """Load a row through a new session so it reflects what requests committed."""

    async def _fetch(model, ident):
        async with session_factory() as session:
            return await session.get(model, ident)

    return _fetch


@pytest.fixture
def query(session_factory):
    async def _query(stmt):
        async with session_factory() as session:
            return (await session.scalars(stmt)).all()

    return _query


@pytest.fixture
def make_user(db):
    """Factory: insert a user and return (user, auth headers)."""
    counter = {"n": 0}

    async def _make(role: str | None = "creator", is_premium: bool = False, username: str | None = None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"user{n}@example.com",
            password_hash="not-a-real-hash",
            username=username or f"user{n}",
            role=role,
            is_premium=is_premium,
        )
        db.add(user)
        await db.commit()
        access_token, _ = create_token_pair(user.id)
        return user, {"Authorization": f"Bearer {access_token}"}

    return _make


@pytest.fixture
def make_idea(db):
    """Factory: insert an idea directly."""

    async def _make(creator: User, **fields):
        values = dict(
            title="Solar kettle",
            description="A kettle that boils water with a fold-out solar dish.",
            tags=["energy", "hardware"],
            created_by=creator.id,
        )
        values.update(fields)
        idea = Idea(**values)
        db.add(idea)
        await db.commit()
        return idea

    return _make


def sign_payload(payload: str, secret: str = WEBHOOK_SECRET) -> str:
    """Build a `stripe-signature` header the same way Stripe does."""
    ts = int(time.time())
    mac = hmac.new(secret.encode(), f"{ts}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={ts},v1={mac}"


@pytest.fixture
def send_event(client):
    """Post a signed Stripe event to the webhook receiver."""
    counter = {"n": 0}

    async def _send(event_type: str, obj: dict):
        counter["n"] += 1
        payload = json.dumps(
            {
                "id": f"evt_test_{counter['n']}",
                "object": "event",
                "type": event_type,
                "data": {"object": obj},
            }
        )
        return await client.post(
            "/webhooks/stripe",
            content=payload,
            headers={"stripe-signature": sign_payload(payload), "content-type": "application/json"},
        )

    return _send
