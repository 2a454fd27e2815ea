"""Which raw grades can produce a given rounded average."""

from itertools import combinations_with_replacement
from typing import Any, Hashable, List, Tuple

from .events import MAX_GRADE
from .rounding import parse_average, round_average

NO_GRADE = 0  # unused slot, only meaningful inside this module


def combos_for_average(target_avg: Any, slot_count: int, tag: Hashable) -> List[Tuple[Any, Tuple[int, ...]]]:
    """List every grade multiset of at most ``slot_count`` grades rounding to ``target_avg``.

    With two slots an 8.0 can be a single 8, two 8s, 7 and 9, or 6 and 10.
    Each match is paired with ``tag`` so callers can carry a category id
    through later stages. Sorted, no duplicates.
    """
    if slot_count < 0:
        raise ValueError(f"slot_count must be >= 0, got {slot_count}")
    if slot_count == 0:
        return []
    target = parse_average(target_avg)

    matches = []
    for combo in combinations_with_replacement(range(NO_GRADE, MAX_GRADE + 1), slot_count):
        grades = tuple(g for g in combo if g != NO_GRADE)
        if round_average(sum(grades), len(grades)) == target:
            matches.append((tag, grades))
    matches.sort()
    return matches
