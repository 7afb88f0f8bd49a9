"""Query limit policy for observation retrieval."""

from __future__ import annotations

import re

from brief_measure.core.errors import InvalidLimitError

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_limit(text: str | None) -> int | None:
    """Read the raw ``limit`` query value.

    Raises:
        InvalidLimitError: If ``text`` is present but not an integer.
    """
    if text is None:
        return None
    if _INTEGER.fullmatch(text) is None:
        raise InvalidLimitError()
    return int(text)


def apply_limit(requested: int | None, default_limit: int, max_limit: int) -> int:
    """Normalize a client-requested result count.

    Args:
        requested: Value from the ``limit`` query parameter, or ``None`` if absent.
        default_limit: Count used when the client does not ask for one.
        max_limit: Largest count a client may ask for.

    Returns:
        ``default_limit`` when ``requested`` is ``None``, otherwise ``requested``.

    Raises:
        InvalidLimitError: If ``requested`` is not positive or exceeds ``max_limit``.
    """
    if requested is None:
        return default_limit
    if requested <= 0 or requested > max_limit:
        raise InvalidLimitError()
    return requested
