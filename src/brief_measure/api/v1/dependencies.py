"""Shared API dependencies for authentication and common functionality."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from brief_measure.core.credentials import ApiKey
from brief_measure.core.errors import UnauthorizedError
from brief_measure.core.settings import Settings
from brief_measure.db.session import get_db
from brief_measure.services.api_key_service import ensure_api_key_exists
from brief_measure.services.observation_service import ObservationService

# auto_error is off so a missing header yields the same 401 as a bad key.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_settings(request: Request) -> Settings:
    """Return the settings the running application was built with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_verified_api_key(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: SessionDep,
) -> ApiKey:
    """Resolve the bearer API key and confirm it is still issued.

    Args:
        credentials: Parsed ``Authorization: Bearer`` header, if any.
        db: Database session

    Returns:
        The caller's API key.

    Raises:
        UnauthorizedError: If the header is missing, malformed or names an
            unknown key. The three cases are indistinguishable to the caller.
    """
    if credentials is None:
        raise UnauthorizedError()
    key = ApiKey.from_hex(credentials.credentials)
    ensure_api_key_exists(db, key)
    return key


def get_observation_service(db: SessionDep, settings: SettingsDep) -> ObservationService:
    return ObservationService.from_settings(db, settings)


# Type aliases for route signatures
VerifiedApiKeyDep = Annotated[ApiKey, Depends(get_verified_api_key)]
ObservationServiceDep = Annotated[ObservationService, Depends(get_observation_service)]
