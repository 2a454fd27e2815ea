"""Possibility graph: a DAG of day events, plus root/leaf discovery and pruning."""

import logging
from typing import Iterator, List

import networkx as nx

from .errors import InvariantViolation
from .events import ROOT_PERIOD, DayEvent

logger = logging.getLogger(__name__)


class PossibilityGraph:
    """Append-only arena of DayEvent nodes.

    Nodes are addressed by integer handles from a counter that never goes
    back, so removing a node never invalidates another handle. Events are
    stored as the ``event`` node attribute and never mutated.
    """

    def __init__(self):
        self._graph = nx.DiGraph()
        self._next_handle = 0

    @classmethod
    def seeded(cls) -> "PossibilityGraph":
        """Graph holding only the root event."""
        graph = cls()
        graph.add_event(DayEvent(period=ROOT_PERIOD))
        return graph

    @property
    def nx_graph(self) -> nx.DiGraph:
        return self._graph

    def add_event(self, event: DayEvent) -> int:
        handle = self._next_handle
        self._next_handle += 1
        self._graph.add_node(handle, event=event)
        return handle

    def add_edge(self, parent: int, child: int) -> None:
        if self.event(child).period <= self.event(parent).period:
            raise InvariantViolation(
                f"edge {parent}->{child} does not move forward in time"
            )
        self._graph.add_edge(parent, child, weight=0)

    def extend(self, leaf: int, event: DayEvent) -> int:
        """Attach a new node for ``event`` below ``leaf``."""
        handle = self.add_event(event)
        self.add_edge(leaf, handle)
        return handle

    def remove(self, handle: int) -> None:
        self._graph.remove_node(handle)

    def event(self, handle: int) -> DayEvent:
        return self._graph.nodes[handle]["event"]

    def __contains__(self, handle: int) -> bool:
        return handle in self._graph

    def __iter__(self) -> Iterator[int]:
        return iter(self._graph.nodes)

    def __len__(self) -> int:
        return self._graph.number_of_nodes()


def roots(graph: PossibilityGraph) -> List[int]:
    g = graph.nx_graph
    return [n for n in g.nodes if g.in_degree(n) == 0]


def root(graph: PossibilityGraph) -> int:
    """Return the unique root, or raise InvariantViolation."""
    found = roots(graph)
    if len(found) != 1:
        raise InvariantViolation(f"possibility graph has {len(found)} roots, expected 1")
    return found[0]


def leaves(graph: PossibilityGraph) -> List[int]:
    g = graph.nx_graph
    return [n for n in g.nodes if g.out_degree(n) == 0]


def prune_stale_leaves(graph: PossibilityGraph, current_period: int, cascade: bool = False) -> int:
    """Remove leaves that did not reach ``current_period``.

    A leaf older than the current period is a history that went silent on
    an active period, so it is dropped. By default only the leaves present
    at call time are removed; a parent left dangling by the removal stays
    until a later call. With ``cascade=True`` removal repeats until no stale
    leaf is left. Returns the number of removed nodes.
    """
    removed = 0
    while True:
        stale = [n for n in leaves(graph) if graph.event(n).period < current_period]
        for handle in stale:
            graph.remove(handle)
        removed += len(stale)
        if not cascade or not stale:
            break
    if removed:
        logger.debug("Pruned %d stale leaves before period %d", removed, current_period)
    return removed
