"""Force Simulation - Iterative force-directed layout for the network graph.

Node state lives in an arena of numpy arrays indexed by position in the
input node list; links are stored as index pairs into that arena. Each
``step()`` applies many-body repulsion, link springs, a weak pull toward the
canvas centre and collision resolution, then integrates velocities with
damping while ``alpha`` (the simulation energy) decays geometrically.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

import numpy as np
import structlog

from money_trail.config import (
    CHARGE_STRENGTH,
    COLLISION_RADIUS,
    LINK_DISTANCE,
    SNAPSHOT_INTERVAL_MS,
    STEP_INTERVAL_MS,
)
from money_trail.graph.model import Edge, Node, NodeType

logger = structlog.get_logger()

DONOR_RADIUS_SCALE = 1.5
INITIAL_JITTER = 100.0
JIGGLE = 1e-6


@dataclass
class LayoutOptions:
    """Layout parameters. Only ``width`` and ``height`` are required."""

    width: float
    height: float
    charge_strength: float = CHARGE_STRENGTH
    link_distance: float = LINK_DISTANCE
    collision_radius: float = COLLISION_RADIUS
    center_strength: float = 0.05
    velocity_decay: float = 0.4
    alpha_min: float = 0.001
    alpha_decay: float | None = None
    drag_alpha: float = 0.3
    step_interval: float = STEP_INTERVAL_MS / 1000
    snapshot_interval: float = SNAPSHOT_INTERVAL_MS / 1000
    seed: int | None = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"canvas must have positive size, got {self.width}x{self.height}")
        if self.alpha_decay is None:
            # Reach alpha_min from 1.0 in ~300 steps.
            self.alpha_decay = 1 - self.alpha_min ** (1 / 300)

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)


@dataclass(frozen=True)
class SimulationNode:
    """Positioned copy of a node, safe to hand to a renderer."""

    node: Node
    index: int
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None
    radius: float = COLLISION_RADIUS

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def is_pinned(self) -> bool:
        return self.fx is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.node.to_dict(),
            "x": self.x,
            "y": self.y,
            "vx": self.vx,
            "vy": self.vy,
            "fx": self.fx,
            "fy": self.fy,
        }


@dataclass(frozen=True)
class SimulationEdge:
    """A link resolved to arena indices."""

    edge: Edge
    source_index: int
    target_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.edge.to_dict(),
            "sourceIndex": self.source_index,
            "targetIndex": self.target_index,
        }


@dataclass(frozen=True)
class LayoutSnapshot:
    """Immutable picture of the layout after some number of steps."""

    nodes: tuple[SimulationNode, ...]
    edges: tuple[SimulationEdge, ...]
    settled: bool
    alpha: float = 0.0
    tick: int = 0

    def position(self, node_id: str) -> tuple[float, float] | None:
        for sim_node in self.nodes:
            if sim_node.id == node_id:
                return (sim_node.x, sim_node.y)
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "settled": self.settled,
            "alpha": self.alpha,
            "tick": self.tick,
        }


class ForceSimulation:
    """Synchronous force-directed layout engine.

    The engine never schedules itself; callers drive it with ``step()``
    (see ``LayoutController`` for the scheduled version). Once ``alpha``
    drops below ``alpha_min`` the simulation is settled and ``step()`` stops
    moving nodes until ``restart()`` or ``pin()`` adds energy again.
    """

    def __init__(
        self,
        nodes: Iterable[Node],
        edges: Iterable[Edge],
        options: LayoutOptions,
    ):
        self.options = options
        self._rng = np.random.default_rng(options.seed)

        self._nodes: list[Node] = []
        self._index: dict[str, int] = {}
        for node in nodes:
            if node.id in self._index:
                continue
            self._index[node.id] = len(self._nodes)
            self._nodes.append(node)

        self._edges: list[SimulationEdge] = []
        dangling = 0
        for edge in edges:
            source = self._index.get(edge.source)
            target = self._index.get(edge.target)
            if source is None or target is None:
                dangling += 1
                continue
            if source == target:
                continue
            self._edges.append(SimulationEdge(edge, source, target))

        n = len(self._nodes)
        cx, cy = options.center
        self._x = cx + (self._rng.random(n) - 0.5) * INITIAL_JITTER
        self._y = cy + (self._rng.random(n) - 0.5) * INITIAL_JITTER
        self._vx = np.zeros(n)
        self._vy = np.zeros(n)
        self._fx = np.full(n, np.nan)
        self._fy = np.full(n, np.nan)
        self._radii = np.array(
            [
                options.collision_radius * DONOR_RADIUS_SCALE
                if node.type == NodeType.DONOR
                else options.collision_radius
                for node in self._nodes
            ],
            dtype=float,
        )

        self._sources = np.array([e.source_index for e in self._edges], dtype=int)
        self._targets = np.array([e.target_index for e in self._edges], dtype=int)
        degree = np.bincount(
            np.concatenate([self._sources, self._targets]), minlength=n
        ).astype(float)
        if len(self._edges):
            source_degree = degree[self._sources]
            target_degree = degree[self._targets]
            self._link_strength = 1.0 / np.minimum(source_degree, target_degree)
            self._link_bias = source_degree / (source_degree + target_degree)
        else:
            self._link_strength = np.zeros(0)
            self._link_bias = np.zeros(0)

        self._alpha = 1.0 if n else 0.0
        self._tick = 0

        logger.debug(
            "layout_initialized",
            nodes=n,
            edges=len(self._edges),
            dangling_edges=dangling,
        )

    # ─── State ──────────────────────────────────────

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def settled(self) -> bool:
        return self._alpha < self.options.alpha_min

    @property
    def tick_count(self) -> int:
        return self._tick

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def has_node(self, node_id: str) -> bool:
        return node_id in self._index

    def position(self, node_id: str) -> tuple[float, float] | None:
        i = self._index.get(node_id)
        if i is None:
            return None
        return (float(self._x[i]), float(self._y[i]))

    def positions(self) -> dict[str, tuple[float, float]]:
        return {node.id: (float(self._x[i]), float(self._y[i])) for i, node in enumerate(self._nodes)}

    def snapshot(self) -> LayoutSnapshot:
        nodes = tuple(
            SimulationNode(
                node=node,
                index=i,
                x=float(self._x[i]),
                y=float(self._y[i]),
                vx=float(self._vx[i]),
                vy=float(self._vy[i]),
                fx=None if np.isnan(self._fx[i]) else float(self._fx[i]),
                fy=None if np.isnan(self._fy[i]) else float(self._fy[i]),
                radius=float(self._radii[i]),
            )
            for i, node in enumerate(self._nodes)
        )
        return LayoutSnapshot(
            nodes=nodes,
            edges=tuple(self._edges),
            settled=self.settled,
            alpha=self._alpha,
            tick=self._tick,
        )

    # ─── Controls ───────────────────────────────────

    def restart(self) -> None:
        """Re-energise the layout without re-randomising positions."""
        if not self._nodes:
            return
        self._alpha = 1.0
        logger.debug("layout_restarted", nodes=self.node_count)

    def pin(self, node_id: str, x: float, y: float) -> bool:
        """Fix a node at ``(x, y)`` (e.g. while dragging) and wake the layout."""
        i = self._index.get(node_id)
        if i is None:
            return False
        self._fx[i] = self._x[i] = x
        self._fy[i] = self._y[i] = y
        self._vx[i] = self._vy[i] = 0.0
        self._alpha = max(self._alpha, self.options.drag_alpha)
        return True

    def release(self, node_id: str) -> bool:
        """Clear a pin so the node rejoins free dynamics."""
        i = self._index.get(node_id)
        if i is None:
            return False
        self._fx[i] = np.nan
        self._fy[i] = np.nan
        return True

    def step(self) -> bool:
        """Advance one tick. Returns False if the layout was already settled."""
        if self.settled:
            return False

        self._alpha *= 1 - self.options.alpha_decay
        self._tick += 1

        if self._nodes:
            self._apply_many_body()
            self._apply_links()
            self._apply_positioning()
            self._apply_collision()
            self._integrate()
            self._apply_centering()

        if self.settled:
            logger.debug("layout_settled", ticks=self._tick, nodes=self.node_count)
        return True

    def run(self, max_steps: int = 1000) -> int:
        """Step until settled or ``max_steps`` is reached; returns steps taken."""
        steps = 0
        while steps < max_steps and self.step():
            steps += 1
        return steps

    # ─── Forces ─────────────────────────────────────

    def _apply_many_body(self) -> None:
        if self.options.charge_strength == 0 or self.node_count < 2:
            return

        # dx[i, j] points from node i toward node j
        dx = self._x[np.newaxis, :] - self._x[:, np.newaxis]
        dy = self._y[np.newaxis, :] - self._y[:, np.newaxis]
        coincident = (dx == 0) & (dy == 0)
        np.fill_diagonal(coincident, False)
        if coincident.any():
            dx[coincident] = (self._rng.random(int(coincident.sum())) - 0.5) * JIGGLE

        dist2 = dx * dx + dy * dy
        np.fill_diagonal(dist2, np.inf)
        dist2 = np.maximum(dist2, 1.0)

        weight = self.options.charge_strength * self._alpha / dist2
        self._vx += (dx * weight).sum(axis=1)
        self._vy += (dy * weight).sum(axis=1)

    def _apply_links(self) -> None:
        if not self._edges:
            return

        s, t = self._sources, self._targets
        dx = self._x[t] + self._vx[t] - self._x[s] - self._vx[s]
        dy = self._y[t] + self._vy[t] - self._y[s] - self._vy[s]
        length = np.maximum(np.sqrt(dx * dx + dy * dy), 1e-9)

        factor = (length - self.options.link_distance) / length * self._alpha * self._link_strength
        dx *= factor
        dy *= factor

        np.add.at(self._vx, t, -dx * self._link_bias)
        np.add.at(self._vy, t, -dy * self._link_bias)
        np.add.at(self._vx, s, dx * (1 - self._link_bias))
        np.add.at(self._vy, s, dy * (1 - self._link_bias))

    def _apply_positioning(self) -> None:
        cx, cy = self.options.center
        pull = self.options.center_strength * self._alpha
        self._vx += (cx - self._x) * pull
        self._vy += (cy - self._y) * pull

    def _apply_collision(self) -> None:
        n = self.node_count
        if n < 2:
            return

        px = self._x + self._vx
        py = self._y + self._vy
        dx = px[:, np.newaxis] - px[np.newaxis, :]
        dy = py[:, np.newaxis] - py[np.newaxis, :]
        reach = self._radii[:, np.newaxis] + self._radii[np.newaxis, :]

        overlap = (dx * dx + dy * dy) < reach * reach
        overlap &= np.triu(np.ones((n, n), dtype=bool), k=1)
        if not overlap.any():
            return

        i, j = np.nonzero(overlap)
        ddx = dx[i, j]
        ddy = dy[i, j]
        dist = np.sqrt(ddx * ddx + ddy * ddy)
        coincident = dist == 0
        if coincident.any():
            ddx[coincident] = (self._rng.random(int(coincident.sum())) - 0.5) * JIGGLE
            dist[coincident] = np.abs(ddx[coincident])

        push = (reach[i, j] - dist) / dist
        ddx *= push
        ddy *= push

        ri2 = self._radii[i] ** 2
        rj2 = self._radii[j] ** 2
        share = rj2 / (ri2 + rj2)
        np.add.at(self._vx, i, ddx * share)
        np.add.at(self._vy, i, ddy * share)
        np.add.at(self._vx, j, -ddx * (1 - share))
        np.add.at(self._vy, j, -ddy * (1 - share))

    def _integrate(self) -> None:
        free = np.isnan(self._fx)
        damping = 1 - self.options.velocity_decay

        self._vx[free] *= damping
        self._vy[free] *= damping
        self._x[free] += self._vx[free]
        self._y[free] += self._vy[free]

        pinned = ~free
        self._x[pinned] = self._fx[pinned]
        self._y[pinned] = self._fy[pinned]
        self._vx[pinned] = 0.0
        self._vy[pinned] = 0.0

    def _apply_centering(self) -> None:
        # Shift free nodes so their centroid sits on the canvas centre.
        free = np.isnan(self._fx)
        if not free.any():
            return
        cx, cy = self.options.center
        self._x[free] -= self._x[free].mean() - cx
        self._y[free] -= self._y[free].mean() - cy
