"""Rate graph construction and fewest-hop path search.

Paths are chosen by hop count, not by rate: the goal is the fewest
intermediate conversions. Rates only matter afterwards, when the calculator
walks the path.
"""

from __future__ import annotations

from collections import deque
from typing import Iterable

from fx_platform.exchange.errors import InvalidEdgeDataError, NoPathFoundError
from fx_platform.exchange.models import ExchangeEdge, Graph


def partition_edges(
    edges: Iterable[ExchangeEdge],
) -> tuple[list[ExchangeEdge], list[InvalidEdgeDataError]]:
    """Split *edges* into usable ones and errors for non-positive rates."""
    valid: list[ExchangeEdge] = []
    rejected: list[InvalidEdgeDataError] = []
    for edge in edges:
        if edge.is_valid:
            valid.append(edge)
        else:
            rejected.append(InvalidEdgeDataError(edge.from_code, edge.to_code, edge.rate))
    return valid, rejected


def build_graph(
    edges: Iterable[ExchangeEdge],
    rejected: list[InvalidEdgeDataError] | None = None,
) -> Graph:
    """Build an adjacency mapping from a flat edge list.

    Edges sharing a source accumulate in input order. An edge with a
    non-positive rate is skipped; the rest of the graph is still built. When
    *rejected* is given, one ``InvalidEdgeDataError`` per skipped edge is
    appended to it.
    """
    valid, invalid = partition_edges(edges)
    if rejected is not None:
        rejected.extend(invalid)

    graph: Graph = {}
    for edge in valid:
        graph.setdefault(edge.from_code, []).append((edge.to_code, edge.rate))
    return graph


def find_path(graph: Graph, source: str, target: str) -> list[str]:
    """Breadth-first search for the fewest-hop path from *source* to *target*.

    Siblings are expanded in insertion order, so identical input always gives
    the same path. A code is marked visited when enqueued. Returns
    ``[source]`` when both ends are the same; raises ``NoPathFoundError``
    once the frontier is exhausted.
    """
    if source == target:
        return [source]

    parents: dict[str, str | None] = {source: None}
    queue: deque[str] = deque([source])
    while queue:
        current = queue.popleft()
        for neighbour, _rate in graph.get(current, []):
            if neighbour in parents:
                continue
            parents[neighbour] = current
            if neighbour == target:
                return _unwind(parents, target)
            queue.append(neighbour)

    raise NoPathFoundError(source, target)


def _unwind(parents: dict[str, str | None], target: str) -> list[str]:
    path: list[str] = []
    node: str | None = target
    while node is not None:
        path.append(node)
        node = parents[node]
    path.reverse()
    return path
