"""Adjacency Index - Symmetric neighbor lookup derived from directed links."""

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from .model import Edge, Graph, Relationship

logger = structlog.get_logger()


@dataclass(frozen=True)
class Neighbor:
    """One adjacency entry: the node on the other end and the link used."""

    neighbor_id: str
    edge: Edge

    @property
    def is_forward(self) -> bool:
        """True when the link is followed in its stored direction."""
        return self.edge.target == self.neighbor_id


def normalize_relationships(values: Iterable[str] | None) -> frozenset[Relationship] | None:
    """Turn a relationship filter into a set of tags; empty means no filter."""
    if not values:
        return None
    tags = set()
    for value in values:
        try:
            tags.add(Relationship(value))
        except ValueError:
            continue
    return frozenset(tags)


class AdjacencyIndex:
    """Map each node id to the links touching it, in both directions.

    Every retained link is inserted twice (source -> target and
    target -> source) so traversal can follow money either way. Links whose
    relationship is excluded by the filter are left out of both entries.
    Endpoints are not checked against the node set.
    """

    def __init__(
        self,
        entries: dict[str, tuple[Neighbor, ...]],
        relationship_filter: frozenset[Relationship] | None = None,
    ):
        self._entries = entries
        self.relationship_filter = relationship_filter

    @classmethod
    def build(
        cls,
        graph: Graph,
        relationship_filter: Iterable[str] | None = None,
    ) -> "AdjacencyIndex":
        allowed = normalize_relationships(relationship_filter)
        entries: dict[str, list[Neighbor]] = defaultdict(list)
        skipped = 0

        for link in graph.links:
            if allowed is not None and link.relationship not in allowed:
                skipped += 1
                continue
            entries[link.source].append(Neighbor(link.target, link))
            entries[link.target].append(Neighbor(link.source, link))

        logger.debug(
            "built_adjacency_index",
            nodes=len(entries),
            links=len(graph.links) - skipped,
            filtered_out=skipped,
        )
        return cls({k: tuple(v) for k, v in entries.items()}, allowed)

    def neighbors(self, node_id: str) -> tuple[Neighbor, ...]:
        return self._entries.get(node_id, ())

    def degree(self, node_id: str) -> int:
        return len(self._entries.get(node_id, ()))

    def node_ids(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
