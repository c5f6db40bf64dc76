# ABOUTME: Relationship graph view: derivation, force layout, and interaction state.
# ABOUTME: Exports the builder, the layout scheduler, and the intent types it accepts.

from shelfkeeper.graph.builder import (
    GraphEdge,
    GraphLoadError,
    GraphNode,
    LibraryGraph,
    build_graph,
    load_graph,
)
from shelfkeeper.graph.layout import ForceSimulation
from shelfkeeper.graph.scheduler import (
    DragEnd,
    DragMove,
    DragStart,
    Frame,
    Hover,
    LayoutScheduler,
    Pan,
    Unhover,
    Zoom,
)

__all__ = [
    "DragEnd",
    "DragMove",
    "DragStart",
    "ForceSimulation",
    "Frame",
    "GraphEdge",
    "GraphLoadError",
    "GraphNode",
    "Hover",
    "LayoutScheduler",
    "LibraryGraph",
    "Pan",
    "Unhover",
    "Zoom",
    "build_graph",
    "load_graph",
]
