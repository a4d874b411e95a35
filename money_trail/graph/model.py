"""Graph Model - Typed nodes and funding links of the money-trail network."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

import structlog

logger = structlog.get_logger()


class NodeType(Enum):
    """Kind of entity a node represents."""

    DONOR = "donor"
    MEDIA = "media"
    FOUNDATION = "foundation"
    PAC = "pac"
    SHELL_ORG = "shell_org"
    POLITICIAN = "politician"
    FOREIGN_NATION = "foreign_nation"
    LOBBYING_FIRM = "lobbying_firm"
    THINK_TANK = "think_tank"
    SUPER_PAC = "super_pac"


class PoliticalLean(Enum):
    """Political lean attached to an entity."""

    LEFT = "left"
    RIGHT = "right"
    NEUTRAL = "neutral"
    BIPARTISAN = "bipartisan"
    UNKNOWN = "unknown"


class Confidence(Enum):
    """How well a recorded link is sourced."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Relationship(str):
    """Relationship tag on a link (``owner``, ``grant``, ``pass_through``, ...).

    The vocabulary is open: any non-empty token is accepted. Values are
    stripped and lowercased on construction, so filters match case-insensitively
    and ``Edge.to_dict()`` writes the normalised tag (``"Pass_Through"`` is
    read back as ``"pass_through"``).
    """

    __slots__ = ()

    def __new__(cls, value: str) -> "Relationship":
        token = str(value).strip().lower()
        if not token:
            raise ValueError("relationship must be a non-empty string")
        return super().__new__(cls, token)


def _as_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value: Any) -> int | None:
    number = _as_float(value)
    if number is None:
        return None
    return int(number)


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _as_str_tuple(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if item is not None and str(item).strip())


class _WireAttributes:
    """Shared camelCase <-> field mapping for attribute payloads."""

    WIRE_FIELDS: ClassVar[dict[str, tuple[str, Callable[[Any], Any]]]] = {}

    @classmethod
    def from_wire(cls, data: dict[str, Any]):
        values = {}
        for wire_key, (attr, coerce) in cls.WIRE_FIELDS.items():
            if data.get(wire_key) is None:
                continue
            value = coerce(data[wire_key])
            if value is not None:
                values[attr] = value
        return cls(**values)

    def to_wire(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for wire_key, (attr, _) in self.WIRE_FIELDS.items():
            value = getattr(self, attr)
            if value is None or value == ():
                continue
            out[wire_key] = list(value) if isinstance(value, tuple) else value
        return out


@dataclass(frozen=True)
class DonorAttributes(_WireAttributes):
    """Donor payload. ``net_worth`` is in billions of dollars."""

    net_worth: float | None = None
    total_contributions: float | None = None
    donor_type: str | None = None

    WIRE_FIELDS: ClassVar[dict[str, tuple[str, Callable[[Any], Any]]]] = {
        "netWorth": ("net_worth", _as_float),
        "totalContributions": ("total_contributions", _as_float),
        "donorType": ("donor_type", _as_str),
    }


@dataclass(frozen=True)
class MediaAttributes(_WireAttributes):
    """Media outlet payload."""

    outlet_type: str | None = None
    domain: str | None = None

    WIRE_FIELDS: ClassVar[dict[str, tuple[str, Callable[[Any], Any]]]] = {
        "outletType": ("outlet_type", _as_str),
        "domain": ("domain", _as_str),
    }


@dataclass(frozen=True)
class PoliticianAttributes(_WireAttributes):
    """Politician payload."""

    party: str | None = None
    chamber: str | None = None

    WIRE_FIELDS: ClassVar[dict[str, tuple[str, Callable[[Any], Any]]]] = {
        "party": ("party", _as_str),
        "chamber": ("chamber", _as_str),
    }


@dataclass(frozen=True)
class OrganizationAttributes(_WireAttributes):
    """Payload shared by foundations, PACs, shell orgs, firms and think tanks."""

    org_type: str | None = None
    ein: str | None = None
    fec_id: str | None = None
    website: str | None = None

    WIRE_FIELDS: ClassVar[dict[str, tuple[str, Callable[[Any], Any]]]] = {
        "orgType": ("org_type", _as_str),
        "ein": ("ein", _as_str),
        "fecId": ("fec_id", _as_str),
        "website": ("website", _as_str),
    }


@dataclass(frozen=True)
class NationAttributes(_WireAttributes):
    """Foreign nation payload.

    Nations carry no type-specific fields; the country name lives on
    ``Node.country`` like any other node's location.
    """


NodeAttributes = (
    DonorAttributes
    | MediaAttributes
    | PoliticianAttributes
    | OrganizationAttributes
    | NationAttributes
)

ATTRIBUTE_TYPES: dict[NodeType, type] = {
    NodeType.DONOR: DonorAttributes,
    NodeType.MEDIA: MediaAttributes,
    NodeType.POLITICIAN: PoliticianAttributes,
    NodeType.FOREIGN_NATION: NationAttributes,
    NodeType.FOUNDATION: OrganizationAttributes,
    NodeType.PAC: OrganizationAttributes,
    NodeType.SHELL_ORG: OrganizationAttributes,
    NodeType.LOBBYING_FIRM: OrganizationAttributes,
    NodeType.THINK_TANK: OrganizationAttributes,
    NodeType.SUPER_PAC: OrganizationAttributes,
}


@dataclass(frozen=True)
class Node:
    """An entity in the funding network.

    ``attributes`` is a payload whose class is fixed by ``type`` (see
    ``ATTRIBUTE_TYPES``); it defaults to an empty payload of the right class.
    Location, board membership and tooltip metadata can appear on any node
    type, so they live on the node itself. None of it drives traversal.
    """

    id: str
    name: str
    type: NodeType
    attributes: NodeAttributes | None = None
    political_lean: PoliticalLean | None = None
    description: str | None = None
    total_funding: float | None = None
    country: str | None = None
    state: str | None = None
    board_members: tuple[str, ...] = ()
    risk_indicators: tuple[str, ...] = ()

    def __post_init__(self):
        if not isinstance(self.type, NodeType):
            object.__setattr__(self, "type", NodeType(self.type))

        expected = ATTRIBUTE_TYPES[self.type]
        if self.attributes is None:
            object.__setattr__(self, "attributes", expected())
        elif not isinstance(self.attributes, expected):
            raise TypeError(
                f"{self.type.value} node {self.id!r} needs {expected.__name__}, "
                f"got {type(self.attributes).__name__}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Node":
        """Parse a node from the camelCase wire shape.

        Raises:
            ValueError: If the id is missing or the type is not recognised
        """
        node_id = _as_str(data.get("id"))
        if node_id is None:
            raise ValueError("node has no id")

        node_type = NodeType(str(data.get("type", "")).strip().lower())
        attributes = ATTRIBUTE_TYPES[node_type].from_wire(data)

        lean = None
        if data.get("politicalLean") is not None:
            try:
                lean = PoliticalLean(str(data["politicalLean"]).lower())
            except ValueError:
                lean = PoliticalLean.UNKNOWN

        return cls(
            id=node_id,
            name=_as_str(data.get("name")) or node_id,
            type=node_type,
            attributes=attributes,
            political_lean=lean,
            description=_as_str(data.get("description")),
            total_funding=_as_float(data.get("totalFunding")),
            country=_as_str(data.get("country")),
            state=_as_str(data.get("state")),
            board_members=_as_str_tuple(data.get("boardMembers")),
            risk_indicators=_as_str_tuple(data.get("riskIndicators")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"id": self.id, "name": self.name, "type": self.type.value}
        out.update(self.attributes.to_wire())
        if self.political_lean is not None:
            out["politicalLean"] = self.political_lean.value
        if self.description is not None:
            out["description"] = self.description
        if self.total_funding is not None:
            out["totalFunding"] = self.total_funding
        if self.country is not None:
            out["country"] = self.country
        if self.state is not None:
            out["state"] = self.state
        if self.board_members:
            out["boardMembers"] = list(self.board_members)
        if self.risk_indicators:
            out["riskIndicators"] = list(self.risk_indicators)
        return out


@dataclass(frozen=True)
class SourceCitation:
    """A document backing a recorded link."""

    url: str
    name: str
    access_date: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out = {"url": self.url, "name": self.name}
        if self.access_date:
            out["accessDate"] = self.access_date
        return out


def _parse_citations(value: Any) -> tuple[SourceCitation, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    citations = []
    for item in value:
        if not isinstance(item, dict) or not item.get("url"):
            continue
        citations.append(
            SourceCitation(
                url=str(item["url"]),
                name=str(item.get("name") or item["url"]),
                access_date=_as_str(item.get("accessDate")),
            )
        )
    return tuple(citations)


@dataclass(frozen=True)
class Edge:
    """A directed funding or influence relationship between two nodes.

    Direction is kept for display and amount attribution; traversal treats
    the link as undirected (see ``AdjacencyIndex``).
    """

    source: str
    target: str
    relationship: Relationship
    amount: float | None = None
    start_year: int | None = None
    end_year: int | None = None
    is_active: bool | None = None
    confidence: Confidence | None = None
    is_disclosed: bool | None = None
    intermediaries: tuple[str, ...] = ()
    source_documents: tuple[SourceCitation, ...] = ()
    grant_purpose: str | None = None

    def __post_init__(self):
        if not isinstance(self.relationship, Relationship):
            object.__setattr__(self, "relationship", Relationship(self.relationship))

    @property
    def amount_or_zero(self) -> float:
        return self.amount or 0.0

    @property
    def key(self) -> tuple[str, str]:
        return (self.source, self.target)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Edge":
        """Parse a link from the camelCase wire shape.

        Raises:
            ValueError: If source, target or relationship is missing
        """
        source = _as_str(data.get("source"))
        target = _as_str(data.get("target"))
        if source is None or target is None:
            raise ValueError("link needs both source and target")

        confidence = None
        if data.get("confidence") is not None:
            try:
                confidence = Confidence(str(data["confidence"]).lower())
            except ValueError:
                confidence = None

        return cls(
            source=source,
            target=target,
            relationship=Relationship(data.get("relationship") or ""),
            amount=_as_float(data.get("amount")),
            start_year=_as_int(data.get("startYear")),
            end_year=_as_int(data.get("endYear")),
            is_active=_as_bool(data.get("isActive")),
            confidence=confidence,
            is_disclosed=_as_bool(data.get("isDisclosed")),
            intermediaries=_as_str_tuple(data.get("intermediaries")),
            source_documents=_parse_citations(data.get("sourceDocuments")),
            grant_purpose=_as_str(data.get("grantPurpose")),
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "source": self.source,
            "target": self.target,
            "relationship": str(self.relationship),
        }
        optional = {
            "amount": self.amount,
            "startYear": self.start_year,
            "endYear": self.end_year,
            "isActive": self.is_active,
            "confidence": self.confidence.value if self.confidence else None,
            "isDisclosed": self.is_disclosed,
            "grantPurpose": self.grant_purpose,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        if self.intermediaries:
            out["intermediaries"] = list(self.intermediaries)
        if self.source_documents:
            out["sourceDocuments"] = [doc.to_dict() for doc in self.source_documents]
        return out


@dataclass(frozen=True)
class Graph:
    """A snapshot of the network: node set plus link set.

    Links may reference ids missing from the node set; they are tolerated
    here and filtered at lookup time.
    """

    nodes: tuple[Node, ...] = ()
    links: tuple[Edge, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "nodes", tuple(self.nodes))
        object.__setattr__(self, "links", tuple(self.links))

    @classmethod
    def empty(cls) -> "Graph":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_map(self) -> dict[str, Node]:
        """Map node id to node. The first node with a given id wins."""
        nodes: dict[str, Node] = {}
        for node in self.nodes:
            nodes.setdefault(node.id, node)
        return nodes

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def relationship_types(self) -> list[str]:
        """Distinct relationship tags in first-seen order."""
        return list(dict.fromkeys(str(link.relationship) for link in self.links))

    @classmethod
    def from_dict(cls, payload: dict[str, Any] | None) -> "Graph":
        """Build a graph from ``{"nodes": [...], "links": [...]}``.

        Best effort: malformed nodes and links are skipped with a warning,
        duplicate node ids keep the first occurrence.
        """
        if not payload:
            return cls.empty()

        nodes: list[Node] = []
        seen: set[str] = set()
        for raw in payload.get("nodes") or []:
            if not isinstance(raw, dict):
                continue
            try:
                node = Node.from_dict(raw)
            except ValueError as e:
                logger.warning("skipped_malformed_node", node_id=raw.get("id"), error=str(e))
                continue
            if node.id in seen:
                logger.warning("skipped_duplicate_node", node_id=node.id)
                continue
            seen.add(node.id)
            nodes.append(node)

        links: list[Edge] = []
        for raw in payload.get("links") or []:
            if not isinstance(raw, dict):
                continue
            try:
                links.append(Edge.from_dict(raw))
            except ValueError as e:
                logger.warning(
                    "skipped_malformed_link",
                    source=raw.get("source"),
                    target=raw.get("target"),
                    error=str(e),
                )

        logger.debug("parsed_network", nodes=len(nodes), links=len(links))
        return cls(nodes=tuple(nodes), links=tuple(links))

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


@dataclass(frozen=True)
class MoneyPath:
    """A discovered route through the network.

    ``node_ids`` holds the full traversal order; ``nodes`` only the ids that
    resolve to nodes in the graph.
    """

    node_ids: tuple[str, ...]
    nodes: tuple[Node, ...]
    links: tuple[Edge, ...]
    total_amount: float = 0.0

    @property
    def hop_count(self) -> int:
        return len(self.links)

    @property
    def start_id(self) -> str:
        return self.node_ids[0]

    @property
    def end_id(self) -> str:
        return self.node_ids[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
            "totalAmount": self.total_amount,
            "hopCount": self.hop_count,
        }


def normalize_node_types(values: Iterable[NodeType | str] | None) -> frozenset[NodeType] | None:
    """Turn a node-type filter into a set of ``NodeType``; empty means no filter.

    Unknown type names are dropped.
    """
    if not values:
        return None
    types = set()
    for value in values:
        if isinstance(value, NodeType):
            types.add(value)
            continue
        try:
            types.add(NodeType(str(value).strip().lower()))
        except ValueError:
            logger.debug("ignored_unknown_node_type", node_type=value)
    return frozenset(types)
