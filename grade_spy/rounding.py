"""Average rounding shared by every source and by the engine.

Averages are compared as 2-decimal values. A source and the engine must
round identically, otherwise consistent histories get rejected (or
inconsistent ones accepted) without any visible error. The rule used
everywhere here is: exact rational average, rounded half-up to cents.
"""

import math
from decimal import Decimal, InvalidOperation
from fractions import Fraction
from typing import Any, Optional

from .errors import MalformedAggregate
from .events import MAX_GRADE, MIN_GRADE

CENTS = Decimal("0.01")


def round_average(total: int, count: int) -> Optional[Decimal]:
    """Round ``total / count`` half-up to 2 decimals.

    Returns None when ``count`` is 0 (the average is undefined, not zero).
    """
    if count == 0:
        return None
    scaled = Fraction(total * 100, count)
    cents = math.floor(scaled + Fraction(1, 2))
    return Decimal(cents).scaleb(-2)


def parse_average(value: Any) -> Decimal:
    """Parse a reported average into a 2-decimal Decimal.

    Accepts Decimal, int, float and numeric strings ("8", "8.5", "8.50").
    Anything that is not a finite grade average with at most 2 fractional
    digits raises MalformedAggregate.
    """
    if isinstance(value, bool):
        raise MalformedAggregate(f"not an average: {value!r}")
    try:
        if isinstance(value, float):
            # repr gives the shortest string that round-trips, i.e. what was formatted
            parsed = Decimal(repr(value))
        else:
            parsed = Decimal(str(value).strip())
    except (InvalidOperation, ValueError) as exc:
        raise MalformedAggregate(f"not an average: {value!r}") from exc

    if not parsed.is_finite():
        raise MalformedAggregate(f"not a finite average: {value!r}")
    if parsed < MIN_GRADE or parsed > MAX_GRADE:
        raise MalformedAggregate(f"outside {MIN_GRADE}..{MAX_GRADE}: {value!r}")
    if parsed != parsed.quantize(CENTS):
        raise MalformedAggregate(f"more than 2 decimals: {value!r}")
    return parsed.quantize(CENTS)
