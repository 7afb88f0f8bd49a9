"""Validation of the two client-supplied observation fields."""

from __future__ import annotations

import re
import uuid
from typing import Final

from brief_measure.core.errors import InvalidIdentifierError, InvalidPayloadError

OBSERVATION_LENGTH: Final[int] = 10
OBSERVATION_ALPHABET: Final[frozenset[str]] = frozenset("1234")
UUID_VERSION: Final[int] = 7

_HYPHENATED = r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
# Simple (32 hex digits), hyphenated, braced hyphenated, or urn:uuid: prefixed.
_UUID_TEXT = re.compile(
    rf"[0-9a-fA-F]{{32}}|{_HYPHENATED}|\{{{_HYPHENATED}\}}|urn:uuid:{_HYPHENATED}"
)


def parse_uuid_v7(text: str) -> uuid.UUID:
    """Parse a textual UUID and require version 7.

    Version-7 identifiers carry a millisecond timestamp in their high bits, so
    their raw order is chronological. Any other version is rejected even when
    the text is a well-formed UUID. The version nibble is read directly, so
    the variant bits are not checked.

    Raises:
        InvalidIdentifierError: If the text is not a UUID or not version 7.
    """
    if not isinstance(text, str) or _UUID_TEXT.fullmatch(text) is None:
        raise InvalidIdentifierError()
    parsed = uuid.UUID(text)
    if (parsed.int >> 76) & 0xF != UUID_VERSION:
        raise InvalidIdentifierError()
    return parsed


def parse_observation(text: str) -> bytes:
    """Return the 10 ASCII bytes of an observation string.

    The string must be exactly ten characters, each one of ``1``, ``2``, ``3``
    or ``4``. No trimming or normalization is applied.

    Raises:
        InvalidPayloadError: On wrong length or any other character.
    """
    if len(text) != OBSERVATION_LENGTH:
        raise InvalidPayloadError()
    for ch in text:
        if ch not in OBSERVATION_ALPHABET:
            raise InvalidPayloadError()
    return text.encode("ascii")
