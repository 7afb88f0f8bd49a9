"""Business logic services for the Brief Measure application."""

from .api_key_service import ensure_api_key_exists, issue_api_key, revoke_api_key, store_api_key
from .observation_service import ObservationService, to_observation_out

__all__ = [
    "ObservationService",
    "ensure_api_key_exists",
    "issue_api_key",
    "revoke_api_key",
    "store_api_key",
    "to_observation_out",
]
