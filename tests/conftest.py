# tests/conftest.py
from __future__ import annotations

import secrets
import time
import uuid
from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from brief_measure.core.credentials import ApiKey
from brief_measure.core.settings import Settings, load_settings
from brief_measure.db.session import create_tables, drop_tables
from brief_measure.main import create_app
from brief_measure.services.api_key_service import store_api_key

TEST_DB_URL = "sqlite://"
TEST_WINDOW_CAP = 2
TEST_DEFAULT_LIMIT = 5
TEST_MAX_LIMIT = 10


def _make_uuid7(ms: int | None = None) -> uuid.UUID:
    """Build a version-7 UUID for ``ms`` milliseconds since the epoch."""
    if ms is None:
        ms = time.time_ns() // 1_000_000
    value = (ms & ((1 << 48) - 1)) << 80
    value |= 0x7 << 76
    value |= secrets.randbits(12) << 64
    value |= 0b10 << 62
    value |= secrets.randbits(62)
    return uuid.UUID(int=value)


def _bearer(key: ApiKey | str) -> dict[str, str]:
    token = key if isinstance(key, str) else key.to_hex()
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def make_uuid7() -> Callable[..., uuid.UUID]:
    """Return a factory for version-7 UUIDs, optionally pinned to a millisecond."""
    return _make_uuid7


@pytest.fixture()
def bearer() -> Callable[[ApiKey | str], dict[str, str]]:
    """Return a helper building ``Authorization: Bearer`` headers."""
    return _bearer


@pytest.fixture()
def test_settings() -> Settings:
    """Settings with a small cap and limits so boundaries are cheap to reach."""
    return load_settings(
        DATABASE_URL=TEST_DB_URL,
        OBSERVATION_WINDOW_SECS=3600,
        OBSERVATION_WINDOW_CAP=TEST_WINDOW_CAP,
        OBSERVATION_DEFAULT_LIMIT=TEST_DEFAULT_LIMIT,
        OBSERVATION_MAX_LIMIT=TEST_MAX_LIMIT,
    )


@pytest.fixture()
def app(test_settings: Settings) -> Iterator[FastAPI]:
    application = create_app(test_settings)
    engine = application.state.engine
    create_tables(engine)
    try:
        yield application
    finally:
        drop_tables(engine)
        engine.dispose()


@pytest.fixture()
def db_session(app: FastAPI) -> Iterator[Session]:
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def api_key(db_session: Session) -> ApiKey:
    """Return a persisted API key for the primary caller."""
    key = ApiKey.generate()
    store_api_key(db_session, key)
    return key


@pytest.fixture()
def other_api_key(db_session: Session) -> ApiKey:
    """Return a persisted API key for a second, unrelated caller."""
    key = ApiKey.generate()
    store_api_key(db_session, key)
    return key
