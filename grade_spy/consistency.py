"""Checks of hypothesized histories against what the source reports.

Both checks recompute sums and counts of items, by category, and compare
the rounded averages with the source's list for the same window. These are
the only places where hypotheses are ruled out; everything else enumerates.
"""

import logging
from collections import defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx

from .events import DayEvent, Scenario, trajectory_items
from .graph import PossibilityGraph
from .rounding import round_average
from .source import Category, Source, fetch_gpa_list

logger = logging.getLogger(__name__)


def path_totals(graph: PossibilityGraph, root: int, leaf: int) -> Dict[int, Tuple[int, int]]:
    """Sum and count of items per category on the path from ``root`` to ``leaf``."""
    totals: Dict[int, List[int]] = defaultdict(lambda: [0, 0])
    for handle in nx.shortest_path(graph.nx_graph, root, leaf):
        for item in graph.event(handle).items:
            totals[item.category_id][0] += item.value
            totals[item.category_id][1] += 1
    return {category: (s, c) for category, (s, c) in totals.items()}


def _accepts(average: Optional[Decimal], count: int, reported: List[Decimal], group_size: int) -> bool:
    # either the average was reported, or someone is missing and this path is empty
    if average is not None and average in reported:
        return True
    return len(reported) < group_size and count == 0


async def extension_is_valid(
    graph: PossibilityGraph,
    source: Source,
    candidate: DayEvent,
    root: int,
    leaf: int,
) -> bool:
    """Can the history ending at ``leaf`` continue with ``candidate``?

    Every category touched by the extended path must have its cumulative
    average in the source's ``[0, candidate.period]`` list for that
    category, then the cross-category average must pass the same test.
    """
    group_size = source.group_size()
    totals = dict(path_totals(graph, root, leaf))
    for item in candidate.items:
        s, c = totals.get(item.category_id, (0, 0))
        totals[item.category_id] = (s + item.value, c + 1)

    for category in sorted(totals):
        s, c = totals[category]
        reported = await fetch_gpa_list(source, 0, candidate.period, category)
        if not _accepts(round_average(s, c), c, reported, group_size):
            logger.debug(
                "Rejected %s below node %d: category %d average not reported",
                candidate, leaf, category,
            )
            return False

    full_sum = sum(s for s, _ in totals.values())
    full_count = sum(c for _, c in totals.values())
    reported = await fetch_gpa_list(source, 0, candidate.period)
    return _accepts(round_average(full_sum, full_count), full_count, reported, group_size)


def scenario_gpa_list(
    scenario: Scenario,
    start: int,
    end: int,
    category: Optional[int] = None,
) -> List[Decimal]:
    """The average list the source would report if ``scenario`` were the truth."""
    averages = []
    for trajectory in scenario:
        total = 0
        count = 0
        for item in trajectory_items(trajectory):
            if category is not None and item.category_id != category:
                continue
            if start <= item.period <= end:
                total += item.value
                count += 1
        if count == 0:
            continue
        averages.append(round_average(total, count))
    averages.sort(reverse=True)
    return averages


async def scenario_matches_source(
    scenario: Scenario,
    source: Source,
    start: int,
    end: int,
    category: Optional[int] = None,
) -> bool:
    reported = await fetch_gpa_list(source, start, end, category)
    return scenario_gpa_list(scenario, start, end, category) == reported


async def verify_scenario(
    scenario: Scenario,
    source: Source,
    start: int,
    end: int,
    categories: Iterable[Category],
) -> bool:
    """Full check: unfiltered window first, then each category."""
    if not await scenario_matches_source(scenario, source, start, end):
        return False
    for category in categories:
        if not await scenario_matches_source(scenario, source, start, end, category.id):
            return False
    return True
