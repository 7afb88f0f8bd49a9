"""Ingestion and retrieval of observations under the admission window."""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from brief_measure.core.codec import parse_observation, parse_uuid_v7
from brief_measure.core.credentials import ApiKey
from brief_measure.core.errors import InternalError, RateLimitedError
from brief_measure.core.limits import apply_limit
from brief_measure.core.settings import Settings
from brief_measure.db.time import utcnow
from brief_measure.models.observation import Observation
from brief_measure.repositories.observation_repo import ObservationRepository
from brief_measure.schemas.observation import ObservationOut

logger = logging.getLogger(__name__)


class ObservationService:
    """Service enforcing the per-key admission window and query limits.

    The admission check counts the key's observations inside the window and
    then inserts. Unless ``strict_admission`` is set the two steps are not
    atomic: concurrent ingests for one key can each see ``count < cap`` and
    all insert, overshooting the cap by up to the number of concurrent
    requests minus one. With ``strict_admission`` the key row is locked for
    the duration of the transaction first (effective on PostgreSQL).
    """

    def __init__(
        self,
        session: Session,
        *,
        window: timedelta,
        cap: int,
        default_limit: int,
        max_limit: int,
        strict_admission: bool = False,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.session = session
        self.repo = ObservationRepository(session)
        self.window = window
        self.cap = cap
        self.default_limit = default_limit
        self.max_limit = max_limit
        self.strict_admission = strict_admission
        self._clock = clock

    @classmethod
    def from_settings(cls, session: Session, settings: Settings) -> ObservationService:
        return cls(
            session,
            window=settings.observation_window,
            cap=settings.observation_window_cap,
            default_limit=settings.observation_default_limit,
            max_limit=settings.observation_max_limit,
            strict_admission=settings.observation_strict_admission,
        )

    def ingest(
        self,
        key: ApiKey,
        uuidv7: str,
        observation: str,
        *,
        now: datetime | None = None,
    ) -> Observation:
        """Validate and store one observation for ``key``.

        Args:
            key: Caller's API key, already verified to exist.
            uuidv7: Client-supplied identifier text.
            observation: Client-supplied payload text.
            now: Admission clock override; defaults to the service clock.

        Returns:
            The persisted observation.

        Raises:
            InvalidIdentifierError: If ``uuidv7`` is not a version-7 UUID.
            InvalidPayloadError: If ``observation`` is malformed.
            RateLimitedError: If the key already reached the cap in the window.
        """
        observation_id = parse_uuid_v7(uuidv7)
        payload = parse_observation(observation)
        now = now or self._clock()

        try:
            if self.strict_admission:
                self.repo.lock_key(key)
            recent = self.repo.count_recent(key, self.window, now)
            if recent >= self.cap:
                logger.info("Rejected observation: %d already stored within window", recent)
                raise RateLimitedError()
            stored = self.repo.insert(key, observation_id, payload, created_at=now)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return stored

    def recent(self, key: ApiKey, limit: int | None = None) -> list[Observation]:
        """Return the key's newest observations, bounded by the query limit policy.

        Raises:
            InvalidLimitError: If ``limit`` is not positive or above the maximum.
        """
        count = apply_limit(limit, self.default_limit, self.max_limit)
        return self.repo.fetch_recent(key, count)


def to_observation_out(observation: Observation) -> ObservationOut:
    """Convert an Observation ORM instance to an API schema."""
    try:
        payload = observation.obs.decode("ascii")
    except UnicodeDecodeError as err:
        raise InternalError() from err
    return ObservationOut(uuidv7=str(observation.id), observation=payload)
