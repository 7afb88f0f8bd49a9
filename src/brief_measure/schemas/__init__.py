"""Pydantic schemas for the Brief Measure API."""

from .api_key import ApiKeyResponse
from .observation import ObservationIn, ObservationOut

__all__ = ["ApiKeyResponse", "ObservationIn", "ObservationOut"]
