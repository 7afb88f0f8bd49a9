"""API key issuance and revocation endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from brief_measure.api.v1.dependencies import SessionDep, VerifiedApiKeyDep
from brief_measure.schemas.api_key import ApiKeyResponse
from brief_measure.services.api_key_service import issue_api_key, revoke_api_key

router = APIRouter(tags=["keys"])


@router.post("/keys", status_code=status.HTTP_201_CREATED, response_model=ApiKeyResponse)
def create_key(db: SessionDep) -> ApiKeyResponse:
    """Issue a new API key. The key is shown once and never again."""
    key = issue_api_key(db)
    return ApiKeyResponse(api_key=key.to_hex())


@router.post("/forget-me-now", status_code=status.HTTP_204_NO_CONTENT)
def forget_me_now(key: VerifiedApiKeyDep, db: SessionDep) -> Response:
    """Delete the caller's API key together with all of its observations."""
    revoke_api_key(db, key)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
