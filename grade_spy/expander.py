"""One period of graph growth: candidate day events, filtered, attached."""

import asyncio
import logging
from dataclasses import dataclass
from itertools import product
from typing import Dict, List, Tuple

from .combinations import combos_for_average
from .consistency import extension_is_valid
from .events import DayEvent, ScoredItem
from .graph import PossibilityGraph, leaves, prune_stale_leaves, root
from .rounding import round_average
from .source import Source, fetch_categories, fetch_gpa_list

logger = logging.getLogger(__name__)

# (category_id, grades) - one category's share of a day; empty grades = no item
CategoryOption = Tuple[int, Tuple[int, ...]]


@dataclass
class ExpansionStats:
    period: int
    candidates: int
    leaves_before: int
    nodes_added: int
    leaves_pruned: int


async def should_skip(source: Source, period: int) -> bool:
    """Nobody got anything on ``period``."""
    return len(await fetch_gpa_list(source, period, period)) == 0


async def gather(source: Source, period: int, max_concurrency: int = 1) -> Dict[int, List]:
    """Per-category average lists for ``period``, active categories only.

    Queries go out one at a time unless ``max_concurrency`` allows more.
    """
    categories = await fetch_categories(source)
    if max_concurrency <= 1:
        lists = []
        for category in categories:
            lists.append(await fetch_gpa_list(source, period, period, category.id))
    else:
        semaphore = asyncio.Semaphore(max_concurrency)

        async def bounded(category_id):
            async with semaphore:
                return await fetch_gpa_list(source, period, period, category_id)

        lists = await asyncio.gather(*(bounded(c.id) for c in categories))

    return {c.id: gpas for c, gpas in zip(categories, lists) if gpas}


def _category_options(category_id: int, gpas: List, group_size: int, slot_count: int) -> List[CategoryOption]:
    options = set()
    for average in gpas:
        options.update(combos_for_average(average, slot_count, category_id))
    if len(gpas) < group_size:
        options.add((category_id, ()))
    return sorted(options)


async def day_possibilities(
    source: Source,
    period: int,
    category_gpas: Dict[int, List],
    slot_count: int = 1,
) -> List[DayEvent]:
    """Every day event a single member could have received on ``period``.

    Takes exactly one option per active category (an explicit "no item"
    option exists when someone went without) and keeps the picks whose
    overall average appears in the day's unfiltered list.
    """
    group_size = source.group_size()
    day_gpas = await fetch_gpa_list(source, period, period)
    someone_idle = len(day_gpas) < group_size

    per_category = [
        _category_options(category_id, gpas, group_size, slot_count)
        for category_id, gpas in sorted(category_gpas.items())
    ]

    events = set()
    for pick in product(*per_category):
        grades = [g for _, option in pick for g in option]
        average = round_average(sum(grades), len(grades))
        if (average is not None and average in day_gpas) or (someone_idle and not grades):
            items = [
                ScoredItem(period=period, category_id=category_id, value=g)
                for category_id, option in pick
                for g in option
            ]
            events.add(DayEvent.build(period, items))

    if someone_idle:
        events.add(DayEvent(period=period))
    return sorted(events)


async def expand_day(
    graph: PossibilityGraph,
    source: Source,
    period: int,
    candidates: List[DayEvent],
    cascade: bool = False,
) -> ExpansionStats:
    """Attach every valid candidate below every current leaf, then prune."""
    start = root(graph)
    ends = leaves(graph)
    added = 0
    for candidate in candidates:
        for leaf in ends:
            if await extension_is_valid(graph, source, candidate, start, leaf):
                graph.extend(leaf, candidate)
                added += 1
    pruned = prune_stale_leaves(graph, period, cascade=cascade)
    stats = ExpansionStats(
        period=period,
        candidates=len(candidates),
        leaves_before=len(ends),
        nodes_added=added,
        leaves_pruned=pruned,
    )
    logger.info(
        "Period %d: %d candidates, %d leaves, %d nodes added, %d pruned",
        period, stats.candidates, stats.leaves_before, added, pruned,
    )
    return stats
