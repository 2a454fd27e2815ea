"""Turning a finished possibility graph into candidate scenarios."""

from itertools import combinations_with_replacement
from typing import Iterator, List, Sequence

import networkx as nx
from scipy.special import comb

from .events import Scenario, Trajectory
from .graph import PossibilityGraph, leaves, root


def trajectories(graph: PossibilityGraph) -> List[Trajectory]:
    """All root-to-leaf histories, root dropped, sorted and deduplicated."""
    start = root(graph)
    found = set()
    for end in leaves(graph):
        if end == start:
            # nothing ever happened: one empty history
            found.add(())
            continue
        for path in nx.all_simple_paths(graph.nx_graph, start, end):
            found.add(tuple(graph.event(handle) for handle in path[1:]))
    return sorted(found)


class ScenarioSpace:
    """Every multiset of ``group_size`` trajectories, drawn with repetition.

    Iterating starts over each time; nothing is materialized up front, so
    callers can stop early.
    """

    def __init__(self, trajectories: Sequence[Trajectory], group_size: int):
        if group_size < 0:
            raise ValueError(f"group_size must be >= 0, got {group_size}")
        self.trajectories = sorted(set(trajectories))
        self.group_size = group_size

    def __iter__(self) -> Iterator[Scenario]:
        return combinations_with_replacement(self.trajectories, self.group_size)

    def __len__(self) -> int:
        n = len(self.trajectories)
        k = self.group_size
        if n == 0:
            return 1 if k == 0 else 0
        return int(comb(n + k - 1, k, exact=True))
