"""Trail View - Filtered money-trail subgraph and visualization export."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog

from money_trail.config import CHARGE_STRENGTH, COLLISION_RADIUS, DEFAULT_MAX_HOPS, LINK_DISTANCE
from money_trail.graph.adjacency import normalize_relationships
from money_trail.graph.display import NODE_TYPE_INFO, node_radius, relationship_label
from money_trail.graph.model import Edge, Graph, MoneyPath, Node, NodeType, normalize_node_types
from money_trail.graph.path_finder import PathFinder, PathFinderOptions
from money_trail.layout.simulation import LayoutSnapshot

logger = structlog.get_logger()


class LayoutHint(Enum):
    """Hints for graph layout algorithms."""

    FORCE_DIRECTED = "force_directed"
    RADIAL = "radial"


@dataclass
class TrailQuery:
    """What the explorer is looking at.

    Without ``start_id`` the view is the filtered network. With it, the view
    narrows to the nodes and links on discovered paths (when any exist).
    """

    start_id: str | None = None
    end_id: str | None = None
    max_hops: int = DEFAULT_MAX_HOPS
    relationship_filter: list[str] = field(default_factory=list)
    node_type_filter: list[NodeType | str] = field(default_factory=list)


@dataclass
class TrailView:
    """Graph visualization data for a money-trail query."""

    nodes: list[Node] = field(default_factory=list)
    links: list[Edge] = field(default_factory=list)
    paths: list[MoneyPath] = field(default_factory=list)
    layout_hints: dict[str, Any] = field(default_factory=dict)

    def as_graph(self) -> Graph:
        return Graph(nodes=tuple(self.nodes), links=tuple(self.links))

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
            "paths": [p.to_dict() for p in self.paths],
            "layout_hints": self.layout_hints,
            "statistics": {
                "node_count": len(self.nodes),
                "link_count": len(self.links),
                "path_count": len(self.paths),
            },
        }

    def to_d3_format(self, snapshot: LayoutSnapshot | None = None) -> dict[str, Any]:
        """Convert to D3.js compatible format, with positions if a snapshot is given."""
        positions = {}
        if snapshot is not None:
            positions = {n.id: {"x": n.x, "y": n.y} for n in snapshot.nodes}

        return {
            "nodes": [
                {
                    **n.to_dict(),
                    "group": n.type.value,
                    "color": NODE_TYPE_INFO[n.type].color,
                    "radius": node_radius(n),
                    **positions.get(n.id, {}),
                }
                for n in self.nodes
            ],
            "links": [
                {
                    "source": link.source,
                    "target": link.target,
                    "type": str(link.relationship),
                    "label": relationship_label(link.relationship),
                    "value": link.amount_or_zero,
                }
                for link in self.links
            ],
        }

    def to_cytoscape_format(self) -> dict[str, Any]:
        """Convert to Cytoscape.js compatible format."""
        elements = []

        for node in self.nodes:
            elements.append(
                {
                    "data": {
                        **node.to_dict(),
                        "label": node.name,
                    },
                    "group": "nodes",
                }
            )

        for link in self.links:
            elements.append(
                {
                    "data": {
                        "source": link.source,
                        "target": link.target,
                        "relationship": str(link.relationship),
                        "amount": link.amount_or_zero,
                    },
                    "group": "edges",
                }
            )

        return {"elements": elements}


class TrailViewBuilder:
    """Build the explorer's filtered view of a network snapshot."""

    def __init__(self, graph: Graph):
        self.graph = graph

    def build(self, query: TrailQuery | None = None) -> TrailView:
        query = query or TrailQuery()

        allowed_relationships = normalize_relationships(query.relationship_filter)
        links = [
            link
            for link in self.graph.links
            if allowed_relationships is None or link.relationship in allowed_relationships
        ]

        nodes = list(self.graph.nodes)
        allowed_types = normalize_node_types(query.node_type_filter)
        if allowed_types is not None:
            nodes = [n for n in nodes if n.type in allowed_types]
            node_ids = {n.id for n in nodes}
            links = [link for link in links if link.source in node_ids and link.target in node_ids]

        view = TrailView(nodes=nodes, links=links)

        if query.start_id:
            finder = PathFinder(Graph(nodes=tuple(nodes), links=tuple(links)))
            paths = finder.find(
                query.start_id,
                query.end_id or None,
                PathFinderOptions(max_hops=query.max_hops),
            )
            view.paths = paths

            if paths:
                path_node_ids: set[str] = set()
                path_link_keys: set[tuple[str, str]] = set()
                for path in paths:
                    path_node_ids.update(path.node_ids)
                    path_link_keys.update(link.key for link in path.links)

                view.nodes = [n for n in nodes if n.id in path_node_ids]
                view.links = [link for link in links if link.key in path_link_keys]

        view.layout_hints = self._build_layout_hints(view, query)

        logger.info(
            "built_trail_view",
            start_id=query.start_id,
            end_id=query.end_id,
            nodes=len(view.nodes),
            links=len(view.links),
            paths=len(view.paths),
        )
        return view

    def _build_layout_hints(self, view: TrailView, query: TrailQuery) -> dict[str, Any]:
        hints: dict[str, Any] = {
            "algorithm": LayoutHint.FORCE_DIRECTED.value,
            "charge": CHARGE_STRENGTH,
            "link_distance": LINK_DISTANCE,
            "collision_radius": COLLISION_RADIUS,
        }
        if query.start_id:
            hints["root_node"] = query.start_id

        type_counts: dict[str, int] = {}
        for node in view.nodes:
            type_counts[node.type.value] = type_counts.get(node.type.value, 0) + 1

        hints["statistics"] = {
            "node_types": type_counts,
            "total_nodes": len(view.nodes),
            "total_amount": sum(link.amount_or_zero for link in view.links),
        }
        return hints
