"""Application error taxonomy.

Every error the service raises on purpose derives from :class:`AppError`. The
public ``message`` is fixed per class so responses never leak internal detail;
the API layer turns these into ``{"error": message}`` JSON bodies.
"""

from __future__ import annotations

from fastapi import status


class AppError(Exception):
    """Base class for errors with a fixed HTTP status and public message."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "internal error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class UnauthorizedError(AppError):
    """Missing, malformed or unknown API key.

    All three cases share this class so callers cannot tell them apart.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    message = "unauthorized"


class InvalidIdentifierError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "invalid uuid"


class InvalidPayloadError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "invalid observation"


class InvalidLimitError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "invalid limit"


class RateLimitedError(AppError):
    """The API key already holds ``cap`` observations inside the window."""

    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    message = "observation limit reached"


class StorageError(AppError):
    message = "database error"


class ConfigurationError(AppError):
    """Raised at startup when a configuration value is missing or unparsable."""

    def __init__(self, key: str, *, missing: bool = False) -> None:
        self.key = key
        prefix = "missing configuration" if missing else "invalid configuration"
        super().__init__(f"{prefix}: {key}")


class InternalError(AppError):
    message = "internal error"
