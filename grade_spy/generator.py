"""Synthetic classes with known grades, for runs where the truth is known."""

from typing import Any, List, Optional, Sequence

import numpy as np
import pandas as pd

from .events import MAX_GRADE, MIN_GRADE, DayEvent, Scenario, ScoredItem
from .source import GRADE_COLUMNS, Category, InMemorySource


def generate_grades(
    group_size: int,
    timeline_end: int,
    n_categories: int,
    seed: Optional[int] = None,
    max_categories_per_period: int = 3,
    participation: float = 1.0,
) -> pd.DataFrame:
    """Random grade table for periods ``0..timeline_end``.

    Each period picks up to ``max_categories_per_period`` categories; in
    each picked category every member gets one grade with probability
    ``participation``. Members are ``0..group_size - 1``.
    """
    if group_size < 1 or n_categories < 1:
        raise ValueError("need at least one member and one category")
    if not 0.0 <= participation <= 1.0:
        raise ValueError(f"participation must be in [0, 1], got {participation}")
    rng = np.random.default_rng(seed)
    rows = []
    for period in range(timeline_end + 1):
        n_active = int(rng.integers(0, min(max_categories_per_period, n_categories) + 1))
        active = sorted(rng.choice(n_categories, size=n_active, replace=False).tolist())
        for category_id in active:
            if participation < 1.0:
                getters = np.flatnonzero(rng.random(group_size) < participation)
            else:
                getters = np.arange(group_size)
            for member in getters.tolist():
                rows.append({
                    "member": member,
                    "category_id": category_id,
                    "period": period,
                    "value": int(rng.integers(MIN_GRADE, MAX_GRADE + 1)),
                })
    return pd.DataFrame(rows, columns=GRADE_COLUMNS)


def build_source(grades: pd.DataFrame, group_size: int, n_categories: int, timeline_end: int) -> InMemorySource:
    categories = [Category(id=i, name=str(i)) for i in range(n_categories)]
    return InMemorySource(range(group_size), categories, timeline_end, grades=grades)


def ground_truth_scenario(grades: pd.DataFrame, members: Sequence[Any]) -> Scenario:
    """The scenario the engine must find for this grade table.

    Every member gets an event on every period where anyone got a grade,
    empty when they themselves got nothing.
    """
    active = sorted(int(p) for p in grades["period"].unique())
    histories: List[tuple] = []
    for member in members:
        own = grades[grades["member"] == member]
        history = []
        for period in active:
            day = own[own["period"] == period]
            items = [
                ScoredItem(period=period, category_id=int(row.category_id), value=int(row.value))
                for row in day.itertuples(index=False)
            ]
            history.append(DayEvent.build(period, items))
        histories.append(tuple(history))
    return tuple(sorted(histories))
