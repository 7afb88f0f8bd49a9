"""Tests for the query limit policy."""

import pytest

from brief_measure.core.errors import InvalidLimitError
from brief_measure.core.limits import apply_limit, parse_limit


def test_absent_limit_uses_default() -> None:
    assert apply_limit(None, 90, 90) == 90
    assert apply_limit(None, 10, 90) == 10


def test_in_range_limit_is_returned_unchanged() -> None:
    assert apply_limit(5, 90, 90) == 5
    assert apply_limit(1, 90, 90) == 1
    assert apply_limit(90, 90, 90) == 90


@pytest.mark.parametrize("requested", [0, -1, 91, 10_000])
def test_out_of_range_limit_is_rejected(requested: int) -> None:
    with pytest.raises(InvalidLimitError):
        apply_limit(requested, 90, 90)


def test_parse_limit_passes_through_absent_value() -> None:
    assert parse_limit(None) is None


@pytest.mark.parametrize(("text", "expected"), [("5", 5), ("+7", 7), ("-3", -3), ("0090", 90)])
def test_parse_limit_reads_integers(text: str, expected: int) -> None:
    assert parse_limit(text) == expected


@pytest.mark.parametrize("text", ["", "ten", "5.0", " 5", "5 ", "1_0", "٣"])
def test_parse_limit_rejects_non_integers(text: str) -> None:
    with pytest.raises(InvalidLimitError):
        parse_limit(text)
