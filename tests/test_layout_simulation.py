"""Tests for the force-directed layout engine."""

import math

import pytest

from money_trail.graph import Edge, Node, NodeType
from money_trail.layout import ForceSimulation, LayoutOptions


def star(n_leaves: int = 4):
    hub = Node(id="hub", name="Hub", type=NodeType.FOUNDATION)
    leaves = [Node(id=f"leaf{i}", name=f"Leaf {i}", type=NodeType.MEDIA) for i in range(n_leaves)]
    edges = [Edge(source="hub", target=leaf.id, relationship="grant", amount=1000) for leaf in leaves]
    return [hub, *leaves], edges


def distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


@pytest.fixture
def options():
    return LayoutOptions(width=800, height=600, seed=42)


class TestLayoutOptions:
    """Tests for layout option defaults and validation."""

    def test_defaults(self):
        """Test configured defaults and derived decay."""
        opts = LayoutOptions(width=800, height=600)

        assert opts.charge_strength == -400
        assert opts.link_distance == 100
        assert opts.collision_radius == 30
        assert opts.center == (400, 300)
        assert 0 < opts.alpha_decay < 0.05

    def test_rejects_empty_canvas(self):
        """Test a non-positive canvas size raises ValueError."""
        with pytest.raises(ValueError):
            LayoutOptions(width=0, height=600)


class TestForceSimulation:
    """Tests for stepping, convergence and pinning."""

    def test_empty_input_is_settled(self, options):
        """Test an empty graph starts settled and never steps."""
        sim = ForceSimulation([], [], options)

        assert sim.settled
        assert sim.step() is False
        assert sim.snapshot().nodes == ()

    def test_converges(self, options):
        """Test a non-empty layout settles within a bounded number of steps."""
        nodes, edges = star()
        sim = ForceSimulation(nodes, edges, options)

        steps = sim.run(max_steps=1000)

        assert sim.settled
        assert steps < 1000
        assert sim.snapshot().settled

    def test_no_movement_after_settling(self, options):
        """Test stepping a settled layout leaves positions unchanged."""
        nodes, edges = star()
        sim = ForceSimulation(nodes, edges, options)
        sim.run()
        before = sim.positions()

        for _ in range(10):
            assert sim.step() is False

        assert sim.positions() == before

    def test_restart_keeps_positions(self, options):
        """Test restart re-energises without re-randomising."""
        nodes, edges = star()
        sim = ForceSimulation(nodes, edges, options)
        sim.run()
        before = sim.positions()

        sim.restart()

        assert sim.alpha == 1.0
        assert not sim.settled
        assert sim.positions() == before

    def test_pin_holds_exact_position(self, options):
        """Test a pinned node stays exactly where it was pinned."""
        nodes, edges = star()
        sim = ForceSimulation(nodes, edges, options)

        assert sim.pin("leaf0", 10.0, 20.0) is True
        for _ in range(50):
            sim.step()

        assert sim.position("leaf0") == (10.0, 20.0)
        snapshot = sim.snapshot()
        pinned = next(n for n in snapshot.nodes if n.id == "leaf0")
        assert pinned.is_pinned
        assert (pinned.fx, pinned.fy) == (10.0, 20.0)

    def test_pin_wakes_settled_layout(self, options):
        """Test pinning re-energises a settled layout."""
        nodes, edges = star()
        sim = ForceSimulation(nodes, edges, options)
        sim.run()

        sim.pin("hub", 100.0, 100.0)

        assert sim.alpha == pytest.approx(options.drag_alpha)
        assert sim.step() is True

    def test_release_frees_node(self, options):
        """Test a released node moves with the rest of the layout again."""
        nodes, edges = star()
        sim = ForceSimulation(nodes, edges, options)
        sim.pin("leaf0", 0.0, 0.0)
        sim.step()

        assert sim.release("leaf0") is True
        sim.step()

        assert sim.position("leaf0") != (0.0, 0.0)
        assert sim.snapshot().nodes[1].fx is None

    def test_pin_unknown_node(self, options):
        """Test pinning an unknown id is refused."""
        sim = ForceSimulation(*star(), options)
        assert sim.pin("nobody", 0, 0) is False
        assert sim.release("nobody") is False

    def test_donor_collision_radius(self, options):
        """Test donors get one and a half times the collision radius."""
        donor = Node(id="d", name="D", type=NodeType.DONOR)
        media = Node(id="m", name="M", type=NodeType.MEDIA)
        sim = ForceSimulation([donor, media], [], options)

        radii = {n.id: n.radius for n in sim.snapshot().nodes}
        assert radii == {"d": 45.0, "m": 30.0}

    def test_dangling_edges_excluded(self, options):
        """Test edges to unknown nodes never reach the arena."""
        nodes, edges = star(2)
        edges.append(Edge(source="hub", target="ghost", relationship="grant"))
        sim = ForceSimulation(nodes, edges, options)

        snapshot = sim.snapshot()
        assert len(snapshot.edges) == 2
        assert all(e.edge.target != "ghost" for e in snapshot.edges)

    def test_edges_reference_arena_indices(self, options):
        """Test edges carry indices into the node list."""
        nodes, edges = star(2)
        snapshot = ForceSimulation(nodes, edges, options).snapshot()

        for sim_edge in snapshot.edges:
            assert snapshot.nodes[sim_edge.source_index].id == sim_edge.edge.source
            assert snapshot.nodes[sim_edge.target_index].id == sim_edge.edge.target

    def test_seed_is_deterministic(self):
        """Test equal seeds give equal layouts."""
        nodes, edges = star()
        first = ForceSimulation(nodes, edges, LayoutOptions(width=800, height=600, seed=7))
        second = ForceSimulation(nodes, edges, LayoutOptions(width=800, height=600, seed=7))
        first.run(50)
        second.run(50)

        assert first.positions() == second.positions()

    def test_single_node_centered(self, options):
        """Test a lone node comes to rest on the canvas centre."""
        sim = ForceSimulation([Node(id="x", name="X", type=NodeType.PAC)], [], options)
        sim.run()

        x, y = sim.position("x")
        assert x == pytest.approx(400)
        assert y == pytest.approx(300)

    def test_linked_pair_separation(self, options):
        """Test a linked pair settles near the link distance."""
        a = Node(id="a", name="A", type=NodeType.PAC)
        b = Node(id="b", name="B", type=NodeType.MEDIA)
        sim = ForceSimulation([a, b], [Edge(source="a", target="b", relationship="grant")], options)
        sim.run()

        assert 60 < distance(sim.position("a"), sim.position("b")) < 200

    def test_collision_separates_nodes(self):
        """Test collision keeps unlinked nodes apart without any charge."""
        opts = LayoutOptions(width=800, height=600, charge_strength=0, seed=3)
        nodes = [Node(id=f"n{i}", name=f"N{i}", type=NodeType.MEDIA) for i in range(5)]
        sim = ForceSimulation(nodes, [], opts)
        sim.run()

        positions = list(sim.positions().values())
        closest = min(
            distance(positions[i], positions[j])
            for i in range(len(positions))
            for j in range(i + 1, len(positions))
        )
        assert closest > 40

    def test_snapshot_to_dict(self, options):
        """Test snapshots serialise node positions."""
        nodes, edges = star(1)
        data = ForceSimulation(nodes, edges, options).snapshot().to_dict()

        assert data["settled"] is False
        assert {"x", "y", "fx", "fy"} <= set(data["nodes"][0])
        assert data["edges"][0]["sourceIndex"] == 0
