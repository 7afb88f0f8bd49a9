"""Concurrent ingest against the admission window.

The default admission check is best-effort: the count and the insert are two
statements, so two requests for the same key that both count before either
inserts are both admitted. The SQLite tests below replay that interleaving
step by step so the guarantee only changes deliberately.

SQLite ignores ``SELECT ... FOR UPDATE``, so the strict cap is only checked
with truly concurrent sessions against PostgreSQL. Set
``BRIEF_MEASURE_TEST_POSTGRES_URL`` (a ``postgresql+psycopg://`` URL for a
disposable database) to run it; otherwise it is skipped.
"""

import os
import threading
from collections.abc import Iterator
from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.engine import Engine

from brief_measure.core.credentials import ApiKey
from brief_measure.core.errors import RateLimitedError
from brief_measure.core.settings import load_settings
from brief_measure.db.session import (
    build_engine,
    build_session_factory,
    create_tables,
    drop_tables,
)
from brief_measure.repositories.observation_repo import ObservationRepository
from brief_measure.services.api_key_service import store_api_key
from brief_measure.services.observation_service import ObservationService

WINDOW = timedelta(hours=1)
CAP = 2
NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)
PAYLOAD = "2143214321"
POSTGRES_URL = os.environ.get("BRIEF_MEASURE_TEST_POSTGRES_URL")
THREADS = 6


@pytest.fixture()
def file_engine(tmp_path) -> Iterator[Engine]:
    """File-backed SQLite so independent sessions get independent connections."""
    settings = load_settings(DATABASE_URL=f"sqlite:///{tmp_path / 'race.db'}")
    engine = build_engine(settings)
    create_tables(engine)
    try:
        yield engine
    finally:
        engine.dispose()


def test_interleaved_ingests_can_overshoot_cap_by_one(file_engine, make_uuid7) -> None:
    factory = build_session_factory(file_engine)
    key = ApiKey.generate()
    with factory() as setup:
        store_api_key(setup, key)
        ObservationService(
            setup, window=WINDOW, cap=CAP, default_limit=10, max_limit=10
        ).ingest(key, str(make_uuid7()), PAYLOAD, now=NOW)

    with factory() as first, factory() as second:
        repo_a = ObservationRepository(first)
        repo_b = ObservationRepository(second)

        # Both requests run their admission check before either inserts.
        assert repo_a.count_recent(key, WINDOW, NOW) == CAP - 1
        assert repo_b.count_recent(key, WINDOW, NOW) == CAP - 1

        repo_a.insert(key, make_uuid7(), PAYLOAD.encode(), created_at=NOW)
        first.commit()
        repo_b.insert(key, make_uuid7(), PAYLOAD.encode(), created_at=NOW)
        second.commit()

    with factory() as check:
        repo = ObservationRepository(check)
        assert repo.count_recent(key, WINDOW, NOW) == CAP + 1
        # Once the overshoot is committed every later ingest is rejected.
        service = ObservationService(check, window=WINDOW, cap=CAP, default_limit=10, max_limit=10)
        with pytest.raises(RateLimitedError):
            service.ingest(key, str(make_uuid7()), PAYLOAD, now=NOW)


def test_sequential_ingests_never_exceed_cap(file_engine, make_uuid7) -> None:
    factory = build_session_factory(file_engine)
    key = ApiKey.generate()
    with factory() as setup:
        store_api_key(setup, key)

    accepted = 0
    for _ in range(CAP + 3):
        with factory() as session:
            service = ObservationService(
                session, window=WINDOW, cap=CAP, default_limit=10, max_limit=10
            )
            try:
                service.ingest(key, str(make_uuid7()), PAYLOAD, now=NOW)
                accepted += 1
            except RateLimitedError:
                pass

    assert accepted == CAP


@pytest.fixture()
def postgres_engine() -> Iterator[Engine]:
    if not POSTGRES_URL:
        pytest.skip("BRIEF_MEASURE_TEST_POSTGRES_URL is not set")
    settings = load_settings(DATABASE_URL=POSTGRES_URL, DATABASE_MAX_CONNECTIONS=THREADS + 1)
    engine = build_engine(settings)
    create_tables(engine)
    try:
        yield engine
    finally:
        drop_tables(engine)
        engine.dispose()


def test_strict_admission_holds_cap_across_threads(postgres_engine, make_uuid7) -> None:
    factory = build_session_factory(postgres_engine)
    key = ApiKey.generate()
    with factory() as setup:
        store_api_key(setup, key)

    ids = [str(make_uuid7()) for _ in range(THREADS)]
    start = threading.Barrier(THREADS)
    outcomes: list[str] = []
    outcomes_lock = threading.Lock()

    def submit(observation_id: str) -> None:
        with factory() as session:
            service = ObservationService(
                session,
                window=WINDOW,
                cap=CAP,
                default_limit=10,
                max_limit=10,
                strict_admission=True,
            )
            start.wait()
            try:
                service.ingest(key, observation_id, PAYLOAD, now=NOW)
                outcome = "accepted"
            except RateLimitedError:
                outcome = "limited"
        with outcomes_lock:
            outcomes.append(outcome)

    workers = [threading.Thread(target=submit, args=(observation_id,)) for observation_id in ids]
    for worker in workers:
        worker.start()
    for worker in workers:
        worker.join(timeout=60)

    assert sorted(outcomes) == ["accepted"] * CAP + ["limited"] * (THREADS - CAP)
    with factory() as check:
        assert ObservationRepository(check).count_recent(key, WINDOW, NOW) == CAP
