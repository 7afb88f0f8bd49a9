"""Observation submission and retrieval endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Query, status

from brief_measure.api.v1.dependencies import ObservationServiceDep, VerifiedApiKeyDep
from brief_measure.core.limits import parse_limit
from brief_measure.schemas.observation import ObservationIn, ObservationOut
from brief_measure.services.observation_service import to_observation_out

router = APIRouter(prefix="/observations", tags=["observations"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ObservationOut)
def create_observation(
    payload: ObservationIn,
    key: VerifiedApiKeyDep,
    service: ObservationServiceDep,
) -> ObservationOut:
    """Store one observation for the caller, subject to the admission window.

    Returns 429 when the caller already stored the configured number of
    observations within the window.
    """
    stored = service.ingest(key, payload.uuidv7, payload.observation)
    return to_observation_out(stored)


@router.get("", response_model=list[ObservationOut])
def list_observations(
    key: VerifiedApiKeyDep,
    service: ObservationServiceDep,
    limit: Annotated[str | None, Query()] = None,
) -> list[ObservationOut]:
    """Return the caller's observations, newest first.

    A ``limit`` that is not an integer is rejected with 400 like one that is
    out of range.
    """
    return [to_observation_out(row) for row in service.recent(key, parse_limit(limit))]
