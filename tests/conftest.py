# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("GATECHA_DATABASE_URL", "sqlite://")
os.environ.setdefault("GATECHA_SECRET_KEY", "test-secret-key-for-sessions")
os.environ.setdefault("GATECHA_ADMIN_PASSWORD", "startup-admin-password")

from gatecha.core.security import KEY_ID_PREFIX
from gatecha.db.session import Base, build_engine
from gatecha.db.session import get_db as app_get_session
from gatecha.main import app as fastapi_app
from gatecha.models import APIKey
from gatecha.services.credentials import CredentialManager
from gatecha.services.keys import KeyRegistry
from gatecha.utils.pow_client import solve_to_payload

TEST_DB_URL = "sqlite://"
ADMIN_USERNAME = "admin"
ADMIN_PASSWORD = "correct horse battery staple"
# Small search space keeps solving fast in tests.
TEST_MAX_NUMBER = 2_000


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = build_engine(TEST_DB_URL, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def registry(db_session: Session) -> KeyRegistry:
    return KeyRegistry(db_session)


@pytest.fixture()
def api_key(registry: KeyRegistry) -> APIKey:
    """An enabled, unrestricted key with a small search space."""
    return registry.create(name="Test Key", max_number=TEST_MAX_NUMBER)


@pytest.fixture()
def make_key(registry: KeyRegistry) -> Callable[..., APIKey]:
    def _make(**kwargs: Any) -> APIKey:
        kwargs.setdefault("max_number", TEST_MAX_NUMBER)
        return registry.create(**kwargs)

    return _make


@pytest.fixture()
def key_headers(api_key: APIKey) -> dict[str, str]:
    assert api_key.key_id.startswith(KEY_ID_PREFIX)
    return {"Authorization": f"Bearer {api_key.key_id}"}


@pytest.fixture()
def admin_user(db_session: Session) -> str:
    CredentialManager(db_session).ensure_admin(ADMIN_USERNAME, ADMIN_PASSWORD)
    return ADMIN_USERNAME


@pytest.fixture()
def admin_headers(db_session: Session, admin_user: str) -> dict[str, str]:
    """Authorization headers carrying a valid admin session."""
    session = CredentialManager(db_session).issue_session(admin_user)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture()
def fetch_challenge(client: TestClient) -> Callable[[str], dict[str, Any]]:
    def _fetch(key_id: str) -> dict[str, Any]:
        response = client.get("/api/v1/challenge", params={"apiKey": key_id})
        assert response.status_code == 200, response.text
        return response.json()

    return _fetch


@pytest.fixture()
def solved_payload(fetch_challenge: Callable[[str], dict[str, Any]]) -> Callable[[APIKey], str]:
    """Return a factory that fetches a challenge for a key and solves it."""

    def _solve(key: APIKey) -> str:
        return solve_to_payload(fetch_challenge(key.key_id))

    return _solve
