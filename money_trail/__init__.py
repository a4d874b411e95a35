"""Money Trail - Campaign-finance network graph engine.

Graph model, path finding and analytics over donor/recipient networks, plus a
force-directed layout for interactive display.
"""

from money_trail.graph import (
    Edge,
    Graph,
    GraphAnalytics,
    MoneyPath,
    Node,
    NodeType,
    PathFinder,
    PathFinderOptions,
    find_paths,
)
from money_trail.layout import LayoutOptions, LayoutSnapshot, create_layout

__all__ = [
    "Edge",
    "Graph",
    "GraphAnalytics",
    "LayoutOptions",
    "LayoutSnapshot",
    "MoneyPath",
    "Node",
    "NodeType",
    "PathFinder",
    "PathFinderOptions",
    "create_layout",
    "find_paths",
]
