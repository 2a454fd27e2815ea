"""Aggregate sources: the only window the engine has on the real data."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from .errors import GradeSpyError, SourceUnavailable
from .events import MAX_GRADE, MIN_GRADE
from .rounding import parse_average, round_average

logger = logging.getLogger(__name__)

GRADE_COLUMNS = ["member", "category_id", "period", "value"]


@dataclass(frozen=True, order=True)
class Category:
    id: int
    name: str


class Source(ABC):
    """Answers average queries for a fixed group over a timeline.

    ``gpa_list`` returns one average per member holding at least one item in
    ``[start, end]`` (within ``category`` when given), sorted descending and
    rounded to 2 decimals. Members without items are left out, never
    reported as zero.
    """

    @abstractmethod
    async def gpa_list(self, start: int, end: int, category: Optional[int] = None) -> Sequence[Any]:
        ...

    @abstractmethod
    async def relevant_categories(self) -> List[Category]:
        ...

    @abstractmethod
    def group_size(self) -> int:
        ...

    @abstractmethod
    def timeline_end(self) -> int:
        ...


async def fetch_gpa_list(source: Source, start: int, end: int, category: Optional[int] = None) -> List[Decimal]:
    """Query ``source`` and normalize the answer to descending Decimals.

    Transport failures come back as SourceUnavailable, unparseable values as
    MalformedAggregate.
    """
    try:
        raw = await source.gpa_list(start, end, category)
    except GradeSpyError:
        raise
    except Exception as exc:
        raise SourceUnavailable(
            f"gpa_list({start}, {end}, {category}) failed: {exc}"
        ) from exc
    return sorted((parse_average(v) for v in raw), reverse=True)


async def fetch_categories(source: Source) -> List[Category]:
    try:
        return list(await source.relevant_categories())
    except GradeSpyError:
        raise
    except Exception as exc:
        raise SourceUnavailable(f"relevant_categories() failed: {exc}") from exc


class InMemorySource(Source):
    """Source computed from a known grade table.

    Grades live in a DataFrame with columns member, category_id, period and
    value. Used for synthetic runs and for checking the engine against a
    known truth.
    """

    def __init__(
        self,
        members: Iterable[Any],
        categories: Iterable[Category],
        timeline_end: int,
        grades: Optional[pd.DataFrame] = None,
    ):
        self.members = list(members)
        self.categories = sorted(categories)
        self._timeline_end = int(timeline_end)
        if grades is None:
            self._grades = pd.DataFrame(columns=GRADE_COLUMNS)
        else:
            missing = set(GRADE_COLUMNS) - set(grades.columns)
            if missing:
                raise ValueError(f"grade table is missing columns: {sorted(missing)}")
            self._grades = grades[GRADE_COLUMNS].copy()

    @property
    def grades(self) -> pd.DataFrame:
        return self._grades

    def add_grade(self, member: Any, value: int, category_id: int, period: int) -> None:
        if member not in self.members:
            raise ValueError(f"unknown member: {member!r}")
        if not MIN_GRADE <= value <= MAX_GRADE:
            raise ValueError(f"grade must be in {MIN_GRADE}..{MAX_GRADE}, got {value}")
        row = pd.DataFrame(
            [{"member": member, "category_id": category_id, "period": period, "value": value}],
            columns=GRADE_COLUMNS,
        )
        if self._grades.empty:
            self._grades = row
        else:
            self._grades = pd.concat([self._grades, row], ignore_index=True)

    async def gpa_list(self, start: int, end: int, category: Optional[int] = None) -> List[Decimal]:
        df = self.grades
        if df.empty:
            return []
        mask = (df["period"] >= start) & (df["period"] <= end) & df["member"].isin(self.members)
        if category is not None:
            mask &= df["category_id"] == category
        window = df.loc[mask]
        if window.empty:
            return []
        totals = window.groupby("member")["value"].agg(["sum", "count"])
        averages = [round_average(int(row["sum"]), int(row["count"])) for _, row in totals.iterrows()]
        return sorted(averages, reverse=True)

    async def relevant_categories(self) -> List[Category]:
        return list(self.categories)

    def group_size(self) -> int:
        return len(self.members)

    def timeline_end(self) -> int:
        return self._timeline_end


class CachingSource(Source):
    """Wrapper that answers repeated queries from memory.

    The engine asks for the same windows over and over while checking
    extensions; only the first ask of each window reaches the wrapped
    source.
    """

    def __init__(self, source: Source):
        self.source = source
        self._gpa_cache: Dict[Tuple[int, int, Optional[int]], List[Any]] = {}
        self._categories: Optional[List[Category]] = None
        self.hits = 0
        self.misses = 0

    async def gpa_list(self, start: int, end: int, category: Optional[int] = None) -> List[Any]:
        key = (start, end, category)
        if key in self._gpa_cache:
            self.hits += 1
            return list(self._gpa_cache[key])
        logger.debug("Cache miss for gpa_list%s", key)
        result = list(await self.source.gpa_list(start, end, category))
        self.misses += 1
        self._gpa_cache[key] = result
        return list(result)

    async def relevant_categories(self) -> List[Category]:
        if self._categories is None:
            self._categories = list(await self.source.relevant_categories())
        return list(self._categories)

    def group_size(self) -> int:
        return self.source.group_size()

    def timeline_end(self) -> int:
        return self.source.timeline_end()
