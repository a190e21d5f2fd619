"""Shared fixtures for the test suite."""

from __future__ import annotations

import asyncio
import json
import uuid
from datetime import datetime, timedelta
from typing import Any, Callable

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from goaltracker.core.database import Base
from goaltracker.core.identity import IdentityClient
from goaltracker.main import app
from goaltracker.models import goal, user  # noqa: F401
from goaltracker.schemas.goal import GoalRead
from goaltracker.services.session import build_session


# ---------------------------------------------------------------------------
# Fake identity provider (Firebase Auth REST API)
# ---------------------------------------------------------------------------

class FakeFirebase:
    """In-memory stand-in for the identitytoolkit accounts endpoints."""

    def __init__(self):
        self.accounts: dict[str, dict[str, Any]] = {}
        self.reset_requests: list[str] = []
        self.requests: list[str] = []
        self.google_accounts: dict[str, dict[str, Any]] = {}

    def add_account(self, email: str, password: str, **extra) -> str:
        uid = uuid.uuid4().hex[:28]
        self.accounts[email] = {"localId": uid, "email": email, "password": password, **extra}
        return uid

    @staticmethod
    def _error(message: str) -> httpx.Response:
        return httpx.Response(400, json={"error": {"code": 400, "message": message}})

    def _session(self, account: dict[str, Any]) -> dict[str, Any]:
        body = {k: v for k, v in account.items() if k != "password"}
        body.update({"idToken": f"id-{account['localId']}", "refreshToken": "refresh", "expiresIn": "3600"})
        return body

    def handler(self, request: httpx.Request) -> httpx.Response:
        endpoint = request.url.path.rsplit(":", 1)[-1]
        self.requests.append(endpoint)
        payload = json.loads(request.content or b"{}")

        if endpoint == "signUp":
            email = payload["email"]
            if "@" not in email:
                return self._error("INVALID_EMAIL")
            if len(payload["password"]) < 6:
                return self._error("WEAK_PASSWORD : Password should be at least 6 characters")
            if email in self.accounts:
                return self._error("EMAIL_EXISTS")
            self.add_account(email, payload["password"])
            return httpx.Response(200, json=self._session(self.accounts[email]))

        if endpoint == "signInWithPassword":
            account = self.accounts.get(payload["email"])
            if account is None or account["password"] != payload["password"]:
                return self._error("INVALID_LOGIN_CREDENTIALS")
            if account.get("disabled"):
                return self._error("USER_DISABLED : The user account has been disabled by an administrator.")
            return httpx.Response(200, json=self._session(account))

        if endpoint == "signInWithIdp":
            token = payload["postBody"].split("&")[0].split("=", 1)[1]
            account = self.google_accounts.get(token)
            if account is None:
                return self._error("INVALID_IDP_RESPONSE")
            return httpx.Response(200, json=self._session(account))

        if endpoint == "update":
            uid = payload["idToken"].removeprefix("id-")
            for account in self.accounts.values():
                if account["localId"] == uid and "displayName" in payload:
                    account["displayName"] = payload["displayName"]
            return httpx.Response(200, json={"localId": uid})

        if endpoint == "sendOobCode":
            if payload["email"] not in self.accounts:
                return self._error("EMAIL_NOT_FOUND")
            self.reset_requests.append(payload["email"])
            return httpx.Response(200, json={"email": payload["email"]})

        return self._error(f"UNKNOWN_ENDPOINT_{endpoint.upper()}")


@pytest.fixture()
def firebase():
    return FakeFirebase()


@pytest.fixture()
def identity(firebase):
    return IdentityClient(
        api_key="test-key",
        base_url="https://identity.test/v1",
        transport=httpx.MockTransport(firebase.handler),
    )


# ---------------------------------------------------------------------------
# Goal store
# ---------------------------------------------------------------------------

@pytest.fixture()
async def session_factory(tmp_path):
    # One file per test; every session gets its own connection
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'goals.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest.fixture()
async def app_session(identity, session_factory):
    session = await build_session(
        identity=identity,
        session_factory=session_factory,
        subscribe_timeout=1.0,
        error_clear_delay=0.2,
    )
    yield session
    await session.close()


@pytest.fixture()
async def client(app_session):
    app.state.session = app_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.state.session = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it is true or fail after ``timeout`` seconds."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


def make_goal(
    title: str = "Goal",
    priority: str = "medium",
    completed: bool = False,
    created_at: datetime | None = None,
    goal_type: str = "custom",
    due_date: datetime | None = None,
    goal_id: str | None = None,
) -> GoalRead:
    """Helper to build a GoalRead without touching the store."""
    if created_at is None:
        created_at = datetime(2026, 2, 15, 12, 0)
    return GoalRead(
        id=goal_id or uuid.uuid4().hex,
        user_id="user-1",
        title=title,
        priority=priority,
        completed=completed,
        goal_type=goal_type,
        due_date=due_date,
        created_at=created_at,
        updated_at=created_at + timedelta(seconds=1),
    )
