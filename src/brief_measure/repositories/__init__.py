"""Repository layer for database access."""

from .observation_repo import ObservationRepository

__all__ = ["ObservationRepository"]
