"""Lifecycle helpers for issued API keys."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from brief_measure.core.credentials import ApiKey
from brief_measure.core.errors import UnauthorizedError
from brief_measure.models.api_key import ApiKeyRecord
from brief_measure.models.observation import Observation

__all__ = [
    "issue_api_key",
    "store_api_key",
    "ensure_api_key_exists",
    "revoke_api_key",
]

logger = logging.getLogger(__name__)

_INSERT_IGNORE = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def store_api_key(db: Session, key: ApiKey) -> None:
    """Persist ``key``; storing a key that already exists is a no-op."""
    insert = _INSERT_IGNORE.get(db.get_bind().dialect.name)
    if insert is not None:
        db.execute(insert(ApiKeyRecord).values(key=key.value).on_conflict_do_nothing())
    elif db.get(ApiKeyRecord, key.value) is None:
        db.add(ApiKeyRecord(key=key.value))
    db.commit()


def issue_api_key(db: Session) -> ApiKey:
    """Generate, persist and return a new API key."""
    key = ApiKey.generate()
    store_api_key(db, key)
    logger.info("Issued new API key")
    return key


def ensure_api_key_exists(db: Session, key: ApiKey) -> None:
    """Raise :class:`UnauthorizedError` unless ``key`` has been issued and not revoked."""
    row = db.execute(select(ApiKeyRecord.key).where(ApiKeyRecord.key == key.value)).first()
    if row is None:
        raise UnauthorizedError()


def revoke_api_key(db: Session, key: ApiKey) -> None:
    """Delete ``key`` and every observation it owns in a single transaction.

    The schema also cascades the delete; purging observations explicitly keeps
    the behaviour identical on databases where foreign keys are not enforced.
    Revoking an unknown key does nothing.
    """
    db.execute(delete(Observation).where(Observation.key == key.value))
    result = db.execute(delete(ApiKeyRecord).where(ApiKeyRecord.key == key.value))
    db.commit()
    if result.rowcount:
        logger.info("Revoked API key and purged its observations")
