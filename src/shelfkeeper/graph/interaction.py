# ABOUTME: View-side interaction state for the graph: hover highlighting, tooltips, zoom.
# ABOUTME: None of this touches physics; zoom/pan is a transform over layout coordinates.

from dataclasses import dataclass

from shelfkeeper.db.catalog import available_copies
from shelfkeeper.db.mapping import BookRecord, StudentRecord
from shelfkeeper.graph.builder import GraphEdge, GraphNode, LibraryGraph

NODE_OPACITY = 1.0
DIMMED_NODE_OPACITY = 0.3
EDGE_OPACITY = 0.6
HIGHLIGHTED_EDGE_OPACITY = 1.0
DIMMED_EDGE_OPACITY = 0.1

BOOK_RADIUS = 12.0
NODE_RADIUS = 10.0
HOVER_GROWTH = 4.0

MIN_ZOOM = 0.5
MAX_ZOOM = 3.0


def node_radius(node: GraphNode, *, hovered: bool = False) -> float:
    """Books draw a little larger than everything else; hover grows either."""
    radius = BOOK_RADIUS if node.kind == "book" else NODE_RADIUS
    return radius + HOVER_GROWTH if hovered else radius


def tooltip_lines(node: GraphNode) -> list[str]:
    """Label and kind, plus author/availability for books or days out for students."""
    lines = [node.label, f"Type: {node.kind}"]
    meta = node.metadata
    if node.kind == "book" and isinstance(meta, BookRecord):
        lines.append(f"Author: {meta.author}")
        lines.append(f"Available: {available_copies(meta)}")
    elif node.kind == "student" and isinstance(meta, StudentRecord):
        lines.append(f"Days borrowed: {meta.days_borrowed}")
    return lines


class InteractionState:
    """Tracks which node is hovered and derives per-element emphasis from it.

    With nothing hovered every node is fully opaque and edges sit at their
    resting opacity. Hovering a node keeps it and its one-hop neighbours
    opaque and dims the rest; only edges touching the hovered node stay lit.
    """

    def __init__(self, graph: LibraryGraph) -> None:
        self._graph = graph
        self.hovered: str | None = None
        self.adjacent: frozenset[str] = frozenset()

    def hover(self, node_id: str) -> None:
        if self._graph.get(node_id) is None:
            raise KeyError(node_id)
        self.hovered = node_id
        self.adjacent = frozenset(self._graph.neighbors(node_id))

    def unhover(self) -> None:
        self.hovered = None
        self.adjacent = frozenset()

    def node_opacity(self, node_id: str) -> float:
        if self.hovered is None or node_id == self.hovered or node_id in self.adjacent:
            return NODE_OPACITY
        return DIMMED_NODE_OPACITY

    def edge_opacity(self, edge: GraphEdge) -> float:
        if self.hovered is None:
            return EDGE_OPACITY
        if self.hovered in (edge.source, edge.target):
            return HIGHLIGHTED_EDGE_OPACITY
        return DIMMED_EDGE_OPACITY

    def dimmed_nodes(self) -> set[str]:
        return {n.id for n in self._graph.nodes if self.node_opacity(n.id) < NODE_OPACITY}

    def dimmed_edges(self) -> list[GraphEdge]:
        return [e for e in self._graph.edges if self.edge_opacity(e) < EDGE_OPACITY]

    def radius(self, node: GraphNode) -> float:
        return node_radius(node, hovered=node.id == self.hovered)

    def tooltip(self) -> list[str] | None:
        if self.hovered is None:
            return None
        node = self._graph.get(self.hovered)
        return tooltip_lines(node) if node is not None else None


@dataclass(frozen=True)
class ZoomTransform:
    """Scale-then-translate mapping from layout space to screen space."""

    k: float = 1.0
    x: float = 0.0
    y: float = 0.0

    def apply(self, px: float, py: float) -> tuple[float, float]:
        return px * self.k + self.x, py * self.k + self.y

    def invert(self, sx: float, sy: float) -> tuple[float, float]:
        return (sx - self.x) / self.k, (sy - self.y) / self.k

    def scale_by(self, factor: float, about: tuple[float, float] = (0.0, 0.0)) -> "ZoomTransform":
        """Zoom around a screen point, clamped to [MIN_ZOOM, MAX_ZOOM].

        The layout point under `about` stays under it after zooming.
        """
        k = min(MAX_ZOOM, max(MIN_ZOOM, self.k * factor))
        lx, ly = self.invert(*about)
        return ZoomTransform(k=k, x=about[0] - lx * k, y=about[1] - ly * k)

    def translate_by(self, dx: float, dy: float) -> "ZoomTransform":
        return ZoomTransform(k=self.k, x=self.x + dx, y=self.y + dy)
