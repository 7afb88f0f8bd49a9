"""Version 1 API endpoints."""

from .endpoints import keys_router, observations_router, system_router

__all__ = [
    "keys_router",
    "observations_router",
    "system_router",
]
