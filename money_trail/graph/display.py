"""Display metadata for node types, relationships and political lean.

Lookup tables only: unknown relationship tags get a readable fallback label
instead of being rejected.
"""

import math
from dataclasses import dataclass

from .model import Node, NodeType, PoliticalLean


@dataclass(frozen=True)
class NodeTypeInfo:
    """How a node type is labelled and drawn."""

    label: str
    color: str
    icon: str


RELATIONSHIP_LABELS: dict[str, str] = {
    "owner": "Owns",
    "owns": "Owns",
    "founder": "Founded",
    "founded": "Founded",
    "investor": "Invested in",
    "board": "Board member",
    "board_member": "Board member",
    "advertiser": "Advertises on",
    "advertises_on": "Advertises on",
    "grant": "Granted to",
    "funder": "Funds",
    "funds": "Funds",
    "fiscal_sponsor": "Fiscal sponsor",
    "subsidiary": "Subsidiary of",
    "pass_through": "Pass-through to",
    "donates_to": "Donates to",
    "contracts_with": "Contracts with",
    "lobbies_for": "Lobbies for",
    "endorses": "Endorses",
    "employs": "Employs",
    "bundler": "Bundler for",
}

NODE_TYPE_INFO: dict[NodeType, NodeTypeInfo] = {
    NodeType.DONOR: NodeTypeInfo("Donor", "#10b981", "DollarSign"),
    NodeType.MEDIA: NodeTypeInfo("Media Outlet", "#ef4444", "Tv"),
    NodeType.FOUNDATION: NodeTypeInfo("Foundation/Lobby", "#8b5cf6", "Building2"),
    NodeType.PAC: NodeTypeInfo("PAC", "#f59e0b", "Flag"),
    NodeType.SHELL_ORG: NodeTypeInfo("Shell Organization", "#6b7280", "AlertTriangle"),
    NodeType.POLITICIAN: NodeTypeInfo("Politician", "#3b82f6", "User"),
    NodeType.FOREIGN_NATION: NodeTypeInfo("Foreign Nation", "#dc2626", "Globe"),
    NodeType.LOBBYING_FIRM: NodeTypeInfo("Lobbying Firm", "#7c3aed", "Briefcase"),
    NodeType.THINK_TANK: NodeTypeInfo("Think Tank", "#0891b2", "BookOpen"),
    NodeType.SUPER_PAC: NodeTypeInfo("Super PAC", "#ea580c", "Zap"),
}

POLITICAL_LEAN_COLORS: dict[PoliticalLean, str] = {
    PoliticalLean.LEFT: "#3b82f6",
    PoliticalLean.RIGHT: "#ef4444",
    PoliticalLean.NEUTRAL: "#6b7280",
    PoliticalLean.BIPARTISAN: "#8b5cf6",
    PoliticalLean.UNKNOWN: "#9ca3af",
}


def relationship_label(relationship: str) -> str:
    """Display label for a relationship tag, e.g. ``grant`` -> ``Granted to``."""
    token = str(relationship).strip().lower()
    if token in RELATIONSHIP_LABELS:
        return RELATIONSHIP_LABELS[token]
    return token.replace("_", " ").capitalize()


def node_type_info(node_type: NodeType) -> NodeTypeInfo:
    return NODE_TYPE_INFO[node_type]


def lean_color(lean: PoliticalLean | None) -> str:
    return POLITICAL_LEAN_COLORS[lean or PoliticalLean.UNKNOWN]


def node_radius(node: Node) -> float:
    """Drawn radius: donors scale with net worth (billions), clamped to 15..30."""
    if node.type == NodeType.DONOR:
        net_worth = getattr(node.attributes, "net_worth", None)
        if net_worth:
            return min(30.0, max(15.0, 10 + math.sqrt(max(net_worth, 0.0)) * 3))
        return 20.0
    return 15.0
