"""API endpoint modules for version 1."""

from .keys import router as keys_router
from .observations import router as observations_router
from .system import router as system_router

__all__ = [
    "keys_router",
    "observations_router",
    "system_router",
]
