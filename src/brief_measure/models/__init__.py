"""SQLAlchemy models for the Brief Measure service."""

from .api_key import ApiKeyRecord
from .observation import Observation

__all__ = ["ApiKeyRecord", "Observation"]
