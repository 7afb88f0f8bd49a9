"""SQLAlchemy model for stored observations."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Index, LargeBinary, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brief_measure.db.session import Base
from brief_measure.db.time import utcnow

if TYPE_CHECKING:
    from .api_key import ApiKeyRecord


class Observation(Base):
    """One immutable observation owned by an API key.

    The client-supplied version-7 UUID is the primary key and doubles as the
    retrieval order, so there is no separate sequence column.
    """

    __tablename__ = "observations"
    __table_args__ = (Index("ix_observations_key_created_at", "key", "created_at"),)

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    key: Mapped[bytes] = mapped_column(
        LargeBinary(32),
        ForeignKey("api_keys.key", ondelete="CASCADE"),
        nullable=False,
    )
    # Ten ASCII digits from the alphabet 1-4, stored verbatim.
    obs: Mapped[bytes] = mapped_column(LargeBinary(10), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    api_key: Mapped[ApiKeyRecord] = relationship("ApiKeyRecord", back_populates="observations")
