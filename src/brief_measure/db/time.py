"""Clock helpers shared by the models and the admission window."""

from datetime import UTC, datetime, timedelta


def utcnow() -> datetime:
    """Timezone-aware current time; the default service clock and ``created_at`` stamp."""
    return datetime.now(UTC)


def window_start(now: datetime, window: timedelta) -> datetime:
    """Earliest ``created_at`` still inside a window ending at ``now``.

    A naive ``now`` is taken to be UTC so it compares with stored timestamps.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    return now - window
