"""Graph module - Money-trail network model, traversal and analytics."""

from .adjacency import AdjacencyIndex, Neighbor
from .analytics import (
    DirectConnections,
    DownstreamRecipient,
    GraphAnalytics,
    NodeStats,
    find_shared_board_members,
    get_direct_connections,
    get_downstream_recipients,
    get_node_stats,
    identify_shell_orgs,
    is_likely_shell_org,
)
from .display import (
    NODE_TYPE_INFO,
    POLITICAL_LEAN_COLORS,
    RELATIONSHIP_LABELS,
    NodeTypeInfo,
    node_radius,
    relationship_label,
)
from .model import (
    Confidence,
    DonorAttributes,
    Edge,
    Graph,
    MediaAttributes,
    MoneyPath,
    NationAttributes,
    Node,
    NodeType,
    OrganizationAttributes,
    PoliticalLean,
    PoliticianAttributes,
    Relationship,
    SourceCitation,
)
from .path_finder import PathFinder, PathFinderOptions, find_intermediaries, find_paths

__all__ = [
    "NODE_TYPE_INFO",
    "POLITICAL_LEAN_COLORS",
    "RELATIONSHIP_LABELS",
    "AdjacencyIndex",
    "Confidence",
    "DirectConnections",
    "DonorAttributes",
    "DownstreamRecipient",
    "Edge",
    "Graph",
    "GraphAnalytics",
    "MediaAttributes",
    "MoneyPath",
    "NationAttributes",
    "Neighbor",
    "Node",
    "NodeStats",
    "NodeType",
    "NodeTypeInfo",
    "OrganizationAttributes",
    "PathFinder",
    "PathFinderOptions",
    "PoliticalLean",
    "PoliticianAttributes",
    "Relationship",
    "SourceCitation",
    "find_intermediaries",
    "find_paths",
    "find_shared_board_members",
    "get_direct_connections",
    "get_downstream_recipients",
    "get_node_stats",
    "identify_shell_orgs",
    "is_likely_shell_org",
    "node_radius",
    "relationship_label",
]
