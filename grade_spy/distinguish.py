"""Walk the timeline, grow the possibility graph, verify full scenarios."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, AsyncIterator, Dict, List, Optional

from .consistency import verify_scenario
from .events import Scenario
from .expander import ExpansionStats, day_possibilities, expand_day, gather, should_skip
from .graph import PossibilityGraph
from .scenarios import ScenarioSpace, trajectories
from .source import CachingSource, Source, fetch_categories

logger = logging.getLogger(__name__)


@dataclass
class DistinguishConfig:
    slots_per_category: int = 1  # grades one member can get per category per period
    max_concurrency: int = 1  # 1 = strictly sequential source queries
    prune_to_fixed_point: bool = False
    cache_queries: bool = True
    max_scenarios: Optional[int] = None  # stop after this many verified scenarios

    def __post_init__(self):
        if self.slots_per_category < 1:
            raise ValueError(f"slots_per_category must be >= 1, got {self.slots_per_category}")
        if self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        if self.max_scenarios is not None and self.max_scenarios < 1:
            raise ValueError(f"max_scenarios must be >= 1, got {self.max_scenarios}")

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> "DistinguishConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DistinguishResult:
    scenarios: List[Scenario]
    n_trajectories: int
    n_candidates: int
    group_size: int
    timeline_end: int
    expansions: List[ExpansionStats] = field(default_factory=list)

    @property
    def fully_disclosed(self) -> bool:
        return len(self.scenarios) == 1


async def build_graph(
    source: Source,
    config: Optional[DistinguishConfig] = None,
    expansions: Optional[List[ExpansionStats]] = None,
) -> PossibilityGraph:
    """Grow the shared possibility graph over periods ``0..timeline_end``."""
    config = config or DistinguishConfig()
    graph = PossibilityGraph.seeded()
    for period in range(0, source.timeline_end() + 1):
        if await should_skip(source, period):
            logger.debug("Period %d: no activity, skipped", period)
            continue
        category_gpas = await gather(source, period, max_concurrency=config.max_concurrency)
        candidates = await day_possibilities(
            source, period, category_gpas, slot_count=config.slots_per_category
        )
        stats = await expand_day(
            graph, source, period, candidates, cascade=config.prune_to_fixed_point
        )
        if expansions is not None:
            expansions.append(stats)
    return graph


async def _verified(source: Source, space: ScenarioSpace, config: DistinguishConfig) -> AsyncIterator[Scenario]:
    categories = await fetch_categories(source)
    end = source.timeline_end()
    seen = set()
    for scenario in space:
        if scenario in seen:
            continue
        if await verify_scenario(scenario, source, 0, end, categories):
            seen.add(scenario)
            yield scenario
            if config.max_scenarios is not None and len(seen) >= config.max_scenarios:
                logger.info("Stopping after %d verified scenarios", len(seen))
                return


async def iter_distinguish(source: Source, config: Optional[DistinguishConfig] = None) -> AsyncIterator[Scenario]:
    """Yield verified scenarios as soon as each one passes."""
    config = config or DistinguishConfig()
    if config.cache_queries and not isinstance(source, CachingSource):
        source = CachingSource(source)
    graph = await build_graph(source, config)
    space = ScenarioSpace(trajectories(graph), source.group_size())
    async for scenario in _verified(source, space, config):
        yield scenario


async def distinguish(source: Source, config: Optional[DistinguishConfig] = None) -> DistinguishResult:
    """Every scenario the source's averages cannot tell apart from the truth."""
    config = config or DistinguishConfig()
    if config.cache_queries and not isinstance(source, CachingSource):
        source = CachingSource(source)

    expansions: List[ExpansionStats] = []
    graph = await build_graph(source, config, expansions)
    space = ScenarioSpace(trajectories(graph), source.group_size())
    logger.info(
        "%d trajectories, %d candidate scenarios to verify",
        len(space.trajectories), len(space),
    )

    scenarios = [s async for s in _verified(source, space, config)]
    scenarios.sort()
    logger.info("%d scenarios match the source", len(scenarios))
    return DistinguishResult(
        scenarios=scenarios,
        n_trajectories=len(space.trajectories),
        n_candidates=len(space),
        group_size=source.group_size(),
        timeline_end=source.timeline_end(),
        expansions=expansions,
    )
