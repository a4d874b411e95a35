"""Layout module - Force-directed positioning of the network for rendering."""

from .controller import LayoutController, SnapshotCallback, create_layout
from .simulation import (
    ForceSimulation,
    LayoutOptions,
    LayoutSnapshot,
    SimulationEdge,
    SimulationNode,
)

__all__ = [
    "ForceSimulation",
    "LayoutController",
    "LayoutOptions",
    "LayoutSnapshot",
    "SimulationEdge",
    "SimulationNode",
    "SnapshotCallback",
    "create_layout",
]
