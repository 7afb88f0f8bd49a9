"""System and transparency endpoints for the Brief Measure API."""

from __future__ import annotations

from fastapi import APIRouter

from brief_measure.api.v1.dependencies import SettingsDep

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
def get_public_config(settings: SettingsDep) -> dict[str, object]:
    """Return a sanitized snapshot of the submission limits.

    Excludes connection strings and server tuning; clients use it to pace
    submissions and size their queries.
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
        },
        "observations": {
            "window_seconds": settings.observation_window_secs,
            "window_cap": settings.observation_window_cap,
            "default_limit": settings.observation_default_limit,
            "max_limit": settings.observation_max_limit,
            "strict_admission": settings.observation_strict_admission,
        },
    }
