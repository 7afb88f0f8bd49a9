"""API key Pydantic schemas."""

from pydantic import BaseModel, Field


class ApiKeyResponse(BaseModel):
    """Freshly issued API key. This is the only time the key is returned."""

    api_key: str = Field(..., min_length=64, max_length=64, description="Lowercase hex key")
