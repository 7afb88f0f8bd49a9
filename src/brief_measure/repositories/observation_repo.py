"""Data access helpers for working with observations."""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from brief_measure.core.credentials import ApiKey
from brief_measure.db.time import window_start
from brief_measure.models.api_key import ApiKeyRecord
from brief_measure.models.observation import Observation

__all__ = ["ObservationRepository"]


class ObservationRepository:
    """Thin wrapper around database access for observation rows.

    Every query is partitioned by API key; there is no way to read or write
    another key's observations through this class.
    """

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def lock_key(self, key: ApiKey) -> None:
        """Take a row lock on the API key for the rest of the transaction.

        Concurrent ingests for the same key then queue behind each other, which
        turns the count-then-insert sequence into a strict cap on backends that
        honour ``SELECT ... FOR UPDATE``.
        """
        self.session.execute(
            select(ApiKeyRecord.key).where(ApiKeyRecord.key == key.value).with_for_update()
        )

    def count_recent(self, key: ApiKey, window: timedelta, now: datetime) -> int:
        """Return how many observations ``key`` stored at or after ``now - window``."""
        cutoff = window_start(now, window)
        result = self.session.execute(
            select(func.count())
            .select_from(Observation)
            .where(Observation.key == key.value, Observation.created_at >= cutoff)
        )
        return int(result.scalar_one())

    def insert(
        self,
        key: ApiKey,
        observation_id: uuid.UUID,
        payload: bytes,
        *,
        created_at: datetime,
    ) -> Observation:
        """Stage a new observation and flush it.

        A duplicate ``observation_id`` (under any key) raises
        ``sqlalchemy.exc.IntegrityError`` at flush time.
        """
        observation = Observation(
            id=observation_id,
            key=key.value,
            obs=payload,
            created_at=created_at,
        )
        self.session.add(observation)
        self.session.flush()
        return observation

    def fetch_recent(self, key: ApiKey, limit: int) -> list[Observation]:
        """Return up to ``limit`` observations for ``key``, newest identifier first."""
        result = self.session.execute(
            select(Observation)
            .where(Observation.key == key.value)
            .order_by(Observation.id.desc())
            .limit(limit)
        )
        return list(result.scalars())
