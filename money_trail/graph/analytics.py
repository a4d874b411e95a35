"""Graph Analytics - Direction-aware statistics and heuristics over the network.

Unlike path finding, the operations here read each link's stored direction:
``incoming`` means the node is the link target, ``outgoing`` the source.
All functions are total: missing optional data yields empty or zero results.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar

import structlog

from money_trail.config import DEFAULT_MAX_HOPS

from .model import Edge, Graph, Node, NodeType
from .path_finder import PathFinder, PathFinderOptions

logger = structlog.get_logger()


@dataclass(frozen=True)
class DirectConnections:
    """Links touching a node, split by stored direction."""

    incoming: tuple[Edge, ...] = ()
    outgoing: tuple[Edge, ...] = ()


@dataclass
class NodeStats:
    """Funding totals and neighbor breakdown for one node."""

    incoming_count: int = 0
    outgoing_count: int = 0
    total_funding_received: float = 0.0
    total_funding_given: float = 0.0
    connected_node_types: dict[str, int] = field(default_factory=dict)

    @property
    def net_flow(self) -> float:
        return self.total_funding_received - self.total_funding_given

    def to_dict(self) -> dict[str, Any]:
        return {
            "incomingCount": self.incoming_count,
            "outgoingCount": self.outgoing_count,
            "totalFundingReceived": self.total_funding_received,
            "totalFundingGiven": self.total_funding_given,
            "connectedNodeTypes": dict(self.connected_node_types),
        }


@dataclass
class DownstreamRecipient:
    """A node reachable from a source, with money and path counts summed over paths."""

    node: Node
    total_amount: float = 0.0
    path_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "node": self.node.to_dict(),
            "totalAmount": self.total_amount,
            "pathCount": self.path_count,
        }


class GraphAnalytics:
    """Read-only analytics bound to one graph snapshot.

    Caches the node map and path finder so repeated calls (for example the
    shell-org scan over every node) do not rebuild them.
    """

    SHELL_ORG_TYPES: ClassVar[frozenset[NodeType]] = frozenset(
        {NodeType.FOUNDATION, NodeType.SHELL_ORG}
    )
    SHELL_MIN_INCOMING: ClassVar[int] = 1
    SHELL_MIN_OUTGOING: ClassVar[int] = 2
    SHELL_BALANCE_TOLERANCE: ClassVar[float] = 0.2

    def __init__(self, graph: Graph):
        self.graph = graph
        self._node_map = graph.node_map()
        self._path_finder: PathFinder | None = None

    @property
    def path_finder(self) -> PathFinder:
        if self._path_finder is None:
            self._path_finder = PathFinder(self.graph)
        return self._path_finder

    def direct_connections(self, node_id: str) -> DirectConnections:
        incoming = []
        outgoing = []
        for link in self.graph.links:
            if link.source == node_id:
                outgoing.append(link)
            if link.target == node_id:
                incoming.append(link)
        return DirectConnections(incoming=tuple(incoming), outgoing=tuple(outgoing))

    def node_stats(self, node_id: str) -> NodeStats:
        connections = self.direct_connections(node_id)
        type_counts: dict[str, int] = {}

        for link in connections.incoming:
            neighbor = self._node_map.get(link.source)
            if neighbor is not None:
                type_counts[neighbor.type.value] = type_counts.get(neighbor.type.value, 0) + 1

        for link in connections.outgoing:
            neighbor = self._node_map.get(link.target)
            if neighbor is not None:
                type_counts[neighbor.type.value] = type_counts.get(neighbor.type.value, 0) + 1

        return NodeStats(
            incoming_count=len(connections.incoming),
            outgoing_count=len(connections.outgoing),
            total_funding_received=sum(link.amount_or_zero for link in connections.incoming),
            total_funding_given=sum(link.amount_or_zero for link in connections.outgoing),
            connected_node_types=type_counts,
        )

    def shared_board_members(self, node_a_id: str, node_b_id: str) -> list[str]:
        node_a = self._node_map.get(node_a_id)
        node_b = self._node_map.get(node_b_id)
        if node_a is None or node_b is None:
            return []
        return find_shared_board_members(node_a, node_b)

    def downstream_recipients(
        self,
        source_id: str,
        max_hops: int = DEFAULT_MAX_HOPS,
    ) -> list[DownstreamRecipient]:
        """Aggregate every path leaving ``source_id`` by the node it ends at.

        Returns:
            Recipients sorted by summed path amount, largest first
        """
        paths = self.path_finder.find(source_id, None, PathFinderOptions(max_hops=max_hops))

        recipients: dict[str, DownstreamRecipient] = {}
        for path in paths:
            end_id = path.end_id
            if end_id == source_id:
                continue
            end_node = self._node_map.get(end_id)
            if end_node is None:
                continue

            recipient = recipients.get(end_id)
            if recipient is None:
                recipient = recipients[end_id] = DownstreamRecipient(node=end_node)
            recipient.total_amount += path.total_amount
            recipient.path_count += 1

        ranked = sorted(recipients.values(), key=lambda r: r.total_amount, reverse=True)
        logger.debug(
            "downstream_recipients",
            source_id=source_id,
            paths=len(paths),
            recipients=len(ranked),
        )
        return ranked

    def is_likely_shell_org(self, node_id: str) -> bool:
        """Pass-through heuristic for foundations and shell orgs.

        Flags a node with at least one incoming and two outgoing links whose
        inflow and outflow differ by less than 20% of the inflow.
        """
        node = self._node_map.get(node_id)
        if node is None or node.type not in self.SHELL_ORG_TYPES:
            return False

        stats = self.node_stats(node_id)
        return (
            stats.incoming_count >= self.SHELL_MIN_INCOMING
            and stats.outgoing_count >= self.SHELL_MIN_OUTGOING
            and abs(stats.total_funding_received - stats.total_funding_given)
            < stats.total_funding_received * self.SHELL_BALANCE_TOLERANCE
        )

    def identify_shell_orgs(self) -> list[Node]:
        flagged = [node for node in self._node_map.values() if self.is_likely_shell_org(node.id)]
        logger.info("identified_shell_orgs", candidates=len(flagged), nodes=len(self._node_map))
        return flagged


def get_direct_connections(graph: Graph, node_id: str) -> DirectConnections:
    return GraphAnalytics(graph).direct_connections(node_id)


def get_node_stats(graph: Graph, node_id: str) -> NodeStats:
    return GraphAnalytics(graph).node_stats(node_id)


def find_shared_board_members(node_a: Node, node_b: Node) -> list[str]:
    """Board members the two nodes have in common, in ``node_a``'s order."""
    if not node_a.board_members or not node_b.board_members:
        return []
    members_b = set(node_b.board_members)
    return list(dict.fromkeys(m for m in node_a.board_members if m in members_b))


def get_downstream_recipients(
    graph: Graph,
    source_id: str,
    max_hops: int = DEFAULT_MAX_HOPS,
) -> list[DownstreamRecipient]:
    return GraphAnalytics(graph).downstream_recipients(source_id, max_hops)


def is_likely_shell_org(graph: Graph, node_id: str) -> bool:
    return GraphAnalytics(graph).is_likely_shell_org(node_id)


def identify_shell_orgs(graph: Graph) -> list[Node]:
    return GraphAnalytics(graph).identify_shell_orgs()
