"""Tests for average rounding and parsing."""

from decimal import Decimal

import pytest

from grade_spy.errors import MalformedAggregate
from grade_spy.rounding import parse_average, round_average


def test_round_average_basic():
    """Test plain averages come back with two decimals."""
    assert round_average(16, 2) == Decimal("8.00")
    assert round_average(23, 3) == Decimal("7.67")
    assert round_average(13, 2) == Decimal("6.50")


def test_round_average_half_up():
    """Test exact halves round up, with no binary float drift."""
    # 65 / 8 == 8.125 exactly
    assert round_average(65, 8) == Decimal("8.13")
    # 21 / 8 == 2.625 exactly
    assert round_average(21, 8) == Decimal("2.63")


def test_round_average_no_items():
    """Test an empty window has no average, not zero."""
    assert round_average(0, 0) is None


def test_round_average_keeps_two_places():
    """Test the result always carries exactly two fractional digits."""
    assert str(round_average(8, 1)) == "8.00"
    assert str(round_average(10, 3)) == "3.33"


@pytest.mark.parametrize("raw,expected", [
    (8.0, Decimal("8.00")),
    (7.67, Decimal("7.67")),
    ("6.5", Decimal("6.50")),
    (Decimal("10"), Decimal("10.00")),
    (1, Decimal("1.00")),
])
def test_parse_average_valid(raw, expected):
    """Test accepted representations of an average."""
    assert parse_average(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", "8.123", 7.675, float("nan"), float("inf"), 11, 0.5, True, None])
def test_parse_average_malformed(raw):
    """Test anything that is not a 2-decimal grade average is rejected."""
    with pytest.raises(MalformedAggregate):
        parse_average(raw)


def test_malformed_is_value_error():
    """Test MalformedAggregate can be caught as ValueError."""
    with pytest.raises(ValueError):
        parse_average("not a number")
