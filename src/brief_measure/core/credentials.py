"""Opaque bearer API keys."""

from __future__ import annotations

import binascii
import secrets
from dataclasses import dataclass
from typing import Final

from brief_measure.core.errors import UnauthorizedError

API_KEY_LENGTH: Final[int] = 32
API_KEY_HEX_LENGTH: Final[int] = API_KEY_LENGTH * 2


@dataclass(frozen=True)
class ApiKey:
    """A 32-byte random secret that both identifies and authorizes its holder.

    Two keys are equal iff their bytes are equal. The key is only ever shown to
    clients as 64 lowercase hex characters.
    """

    value: bytes

    def __post_init__(self) -> None:
        if len(self.value) != API_KEY_LENGTH:
            raise ValueError(f"API key must be {API_KEY_LENGTH} bytes")

    def __repr__(self) -> str:
        return "ApiKey(<redacted>)"

    @classmethod
    def generate(cls) -> ApiKey:
        """Draw a fresh key from the operating system CSPRNG."""
        return cls(secrets.token_bytes(API_KEY_LENGTH))

    @classmethod
    def from_hex(cls, text: str) -> ApiKey:
        """Decode a key from its hex form.

        Surrounding whitespace is ignored. Anything other than exactly 64 hex
        characters raises :class:`UnauthorizedError`, the same error an unknown
        key produces.
        """
        text = text.strip()
        if len(text) != API_KEY_HEX_LENGTH:
            raise UnauthorizedError()
        try:
            return cls(binascii.unhexlify(text))
        except (binascii.Error, ValueError) as err:
            raise UnauthorizedError() from err

    def to_hex(self) -> str:
        return self.value.hex()
