"""Shared test fixtures for the money-trail graph engine."""

from pathlib import Path

import pytest

from money_trail.graph import (
    DonorAttributes,
    Edge,
    Graph,
    MediaAttributes,
    Node,
    NodeType,
    OrganizationAttributes,
)

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def make_node(node_id: str, node_type: NodeType, name: str | None = None, **kwargs) -> Node:
    return Node(id=node_id, name=name or node_id, type=node_type, **kwargs)


def make_edge(source: str, target: str, amount: float | None = None, relationship: str = "grant") -> Edge:
    return Edge(source=source, target=target, relationship=relationship, amount=amount)


@pytest.fixture
def chain_graph():
    """A(donor) -> B(foundation) -> C(media) with $1M and $900K links."""
    return Graph(
        nodes=(
            make_node("A", NodeType.DONOR),
            make_node("B", NodeType.FOUNDATION),
            make_node("C", NodeType.MEDIA),
        ),
        links=(
            make_edge("A", "B", 1_000_000),
            make_edge("B", "C", 900_000),
        ),
    )


@pytest.fixture
def sample_network():
    """A small funding network with a pass-through foundation and shared boards."""
    nodes = (
        make_node(
            "mercer",
            NodeType.DONOR,
            "Robert Mercer",
            attributes=DonorAttributes(net_worth=1.0, donor_type="individual"),
        ),
        make_node(
            "koch",
            NodeType.DONOR,
            "Charles Koch",
            attributes=DonorAttributes(net_worth=64.0),
        ),
        make_node(
            "donors-trust",
            NodeType.FOUNDATION,
            "DonorsTrust",
            attributes=OrganizationAttributes(ein="52-2166327"),
            board_members=("Whitney Ball", "Lawson Bader", "Kimberly Dennis"),
        ),
        make_node(
            "afp",
            NodeType.SHELL_ORG,
            "Americans for Prosperity",
            board_members=("Kimberly Dennis", "Tim Phillips", "Lawson Bader"),
        ),
        make_node(
            "breitbart",
            NodeType.MEDIA,
            "Breitbart",
            attributes=MediaAttributes(outlet_type="digital", domain="breitbart.com"),
        ),
        make_node("daily-caller", NodeType.MEDIA, "Daily Caller"),
        make_node("heritage", NodeType.THINK_TANK, "Heritage Foundation"),
    )
    links = (
        make_edge("mercer", "donors-trust", 1_000_000),
        make_edge("koch", "donors-trust", 500_000),
        make_edge("donors-trust", "breitbart", 800_000),
        make_edge("donors-trust", "daily-caller", 600_000),
        make_edge("mercer", "breitbart", 10_000_000, relationship="owner"),
        make_edge("koch", "afp", 2_000_000, relationship="funder"),
        make_edge("afp", "heritage", 300_000),
        make_edge("heritage", "ghost-org", 50_000),
    )
    return Graph(nodes=nodes, links=links)


@pytest.fixture
def sample_network_path():
    """Path to the on-disk JSON fixture."""
    return FIXTURES_DIR / "sample_network.json"
