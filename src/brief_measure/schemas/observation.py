"""Observation-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ObservationIn(BaseModel):
    """Observation submitted by a client.

    Only the JSON types are checked here; the UUID version and the payload
    alphabet are validated by the service so they map to the service's own
    error messages.
    """

    uuidv7: str = Field(..., description="Client-generated version-7 UUID")
    observation: str = Field(..., description="Ten characters, each one of 1-4")


class ObservationOut(BaseModel):
    """Stored observation as returned to its owner."""

    uuidv7: str
    observation: str
