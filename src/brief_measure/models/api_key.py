"""SQLAlchemy model for issued API keys."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import LargeBinary
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brief_measure.db.session import Base

if TYPE_CHECKING:
    from .observation import Observation


class ApiKeyRecord(Base):
    """An issued API key. Existence of the row is the whole authorization model."""

    __tablename__ = "api_keys"

    key: Mapped[bytes] = mapped_column(LargeBinary(32), primary_key=True)

    observations: Mapped[list[Observation]] = relationship(
        "Observation",
        back_populates="api_key",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
