"""Path Finder - Trace money flows between entities across the network."""

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from money_trail.config import DEFAULT_MAX_HOPS

from .adjacency import AdjacencyIndex, normalize_relationships
from .model import Edge, Graph, MoneyPath, Node, NodeType, normalize_node_types

logger = structlog.get_logger()


@dataclass
class PathFinderOptions:
    """Options for a path search.

    Empty or missing filters mean "no filter". The node-type filter is never
    applied to the start node.
    """

    max_hops: int = DEFAULT_MAX_HOPS
    relationship_filter: list[str] | None = None
    node_type_filter: list[NodeType | str] | None = None


class PathFinder:
    """Breadth-first search for simple paths over a graph snapshot.

    Links are followed in either direction and every link's amount is added
    to the path total as stored, whichever way it was traversed. Adjacency
    indexes are cached per relationship filter, so one finder can serve
    repeated queries against the same snapshot.
    """

    def __init__(self, graph: Graph):
        self.graph = graph
        self._node_map = graph.node_map()
        self._indexes: dict[frozenset | None, AdjacencyIndex] = {}

    def index_for(self, relationship_filter: Iterable[str] | None = None) -> AdjacencyIndex:
        key = normalize_relationships(relationship_filter)
        if key not in self._indexes:
            self._indexes[key] = AdjacencyIndex.build(self.graph, key)
        return self._indexes[key]

    def find(
        self,
        start_id: str,
        end_id: str | None = None,
        options: PathFinderOptions | None = None,
    ) -> list[MoneyPath]:
        """Find simple paths from ``start_id``.

        Args:
            start_id: Node to start from
            end_id: Node the paths must end at; None collects every path
                leaving the start (all prefixes, not only maximal paths)
            options: Hop budget and filters

        Returns:
            Paths sorted by total amount, largest first. Empty when the start
            is unknown or the hop budget is below one.
        """
        options = options or PathFinderOptions()

        if options.max_hops < 1:
            logger.debug("path_search_skipped", reason="max_hops", max_hops=options.max_hops)
            return []
        if start_id not in self._node_map:
            logger.debug("path_search_skipped", reason="unknown_start", start_id=start_id)
            return []

        index = self.index_for(options.relationship_filter)
        allowed_types = normalize_node_types(options.node_type_filter)
        max_length = options.max_hops + 1

        paths: list[MoneyPath] = []
        queue: deque[tuple[str, tuple[str, ...], tuple[Edge, ...], float]] = deque(
            [(start_id, (start_id,), (), 0.0)]
        )

        while queue:
            current, node_path, link_path, total = queue.popleft()

            if end_id is not None:
                if current == end_id and len(node_path) > 1:
                    paths.append(self._make_path(node_path, link_path, total))
                    continue
            elif len(node_path) > 1:
                paths.append(self._make_path(node_path, link_path, total))

            if len(node_path) >= max_length:
                continue

            for neighbor in index.neighbors(current):
                next_id = neighbor.neighbor_id
                if next_id in node_path:
                    continue

                if allowed_types is not None:
                    next_node = self._node_map.get(next_id)
                    if next_node is None or next_node.type not in allowed_types:
                        continue

                queue.append(
                    (
                        next_id,
                        (*node_path, next_id),
                        (*link_path, neighbor.edge),
                        total + neighbor.edge.amount_or_zero,
                    )
                )

        paths.sort(key=lambda p: p.total_amount, reverse=True)

        logger.debug(
            "paths_found",
            start_id=start_id,
            end_id=end_id,
            max_hops=options.max_hops,
            count=len(paths),
        )
        return paths

    def find_intermediaries(
        self,
        start_id: str,
        end_id: str,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> list[Node]:
        """Nodes strictly between start and end on any connecting path, in graph order."""
        paths = self.find(start_id, end_id, PathFinderOptions(max_hops=max_hops))

        intermediary_ids: set[str] = set()
        for path in paths:
            intermediary_ids.update(path.node_ids[1:-1])

        seen: set[str] = set()
        result = []
        for node in self.graph.nodes:
            if node.id in intermediary_ids and node.id not in seen:
                seen.add(node.id)
                result.append(node)
        return result

    def _make_path(
        self,
        node_path: tuple[str, ...],
        link_path: tuple[Edge, ...],
        total: float,
    ) -> MoneyPath:
        nodes = tuple(self._node_map[i] for i in node_path if i in self._node_map)
        return MoneyPath(node_ids=node_path, nodes=nodes, links=link_path, total_amount=total)


def find_paths(
    graph: Graph,
    start_id: str,
    end_id: str | None = None,
    options: PathFinderOptions | None = None,
) -> list[MoneyPath]:
    """Find simple paths from ``start_id`` (optionally to ``end_id``); see ``PathFinder.find``."""
    return PathFinder(graph).find(start_id, end_id, options)


def find_intermediaries(
    graph: Graph,
    start_id: str,
    end_id: str,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> list[Node]:
    """Find every organisation sitting between two entities."""
    return PathFinder(graph).find_intermediaries(start_id, end_id, max_hops)
