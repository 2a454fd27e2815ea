"""Scored items, day events and the tuples built from them."""

from dataclasses import dataclass, field
from typing import Iterable, Tuple

MIN_GRADE = 1
MAX_GRADE = 10
ROOT_PERIOD = -1  # period of the root event, before any data


@dataclass(frozen=True, order=True)
class ScoredItem:
    period: int
    category_id: int
    value: int


@dataclass(frozen=True, order=True)
class DayEvent:
    """Everything one member gained on one period, possibly nothing."""
    period: int
    items: Tuple[ScoredItem, ...] = field(default=())

    @classmethod
    def build(cls, period: int, items: Iterable[ScoredItem]) -> "DayEvent":
        return cls(period=period, items=tuple(sorted(items)))

    @property
    def is_root(self) -> bool:
        return self.period == ROOT_PERIOD

    def total(self) -> int:
        return sum(item.value for item in self.items)


# One member's hypothesized history, root excluded.
Trajectory = Tuple[DayEvent, ...]
# One hypothesis for the whole group, trajectories sorted.
Scenario = Tuple[Trajectory, ...]


def trajectory_items(trajectory: Trajectory) -> Iterable[ScoredItem]:
    for event in trajectory:
        yield from event.items
