# ABOUTME: Cooperative step loop that owns the layout and applies queued interaction intents.
# ABOUTME: Input handlers post hover/drag/zoom intents; each step drains them, then ticks.

import logging
from collections import deque
from dataclasses import dataclass

from shelfkeeper.graph.builder import LibraryGraph
from shelfkeeper.graph.interaction import InteractionState, ZoomTransform
from shelfkeeper.graph.layout import (
    DEFAULT_HEIGHT,
    DEFAULT_WIDTH,
    DRAG_ALPHA_TARGET,
    ForceSimulation,
    TickCallback,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Hover:
    node_id: str


@dataclass(frozen=True)
class Unhover:
    pass


@dataclass(frozen=True)
class DragStart:
    node_id: str


@dataclass(frozen=True)
class DragMove:
    """Pointer position in screen coordinates."""

    node_id: str
    x: float
    y: float


@dataclass(frozen=True)
class DragEnd:
    node_id: str


@dataclass(frozen=True)
class Zoom:
    factor: float
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Pan:
    dx: float
    dy: float


Intent = Hover | Unhover | DragStart | DragMove | DragEnd | Zoom | Pan


@dataclass(frozen=True)
class NodeView:
    id: str
    label: str
    kind: str
    x: float
    y: float
    radius: float
    opacity: float


@dataclass(frozen=True)
class EdgeView:
    source: str
    target: str
    relation: str
    x1: float
    y1: float
    x2: float
    y2: float
    opacity: float


@dataclass(frozen=True)
class Frame:
    """Everything a renderer needs to draw one tick, in screen coordinates."""

    nodes: tuple[NodeView, ...]
    edges: tuple[EdgeView, ...]
    tooltip: tuple[str, ...] | None
    alpha: float


class SchedulerStoppedError(RuntimeError):
    """Raised when posting to or stepping a scheduler that was torn down."""


class LayoutScheduler:
    """Drives a ForceSimulation for one displayed graph.

    Only step() mutates the simulation or interaction state. Anything else
    (pointer handlers, a UI thread) posts intents, which are applied in
    order at the start of the next step.
    """

    def __init__(
        self,
        graph: LibraryGraph,
        *,
        width: float = DEFAULT_WIDTH,
        height: float = DEFAULT_HEIGHT,
        seed: int = 0,
    ) -> None:
        self.graph = graph
        self.simulation = ForceSimulation(
            graph.nodes, graph.edges, width=width, height=height, seed=seed
        )
        self.interaction = InteractionState(graph)
        self.transform = ZoomTransform()
        self._intents: deque[Intent] = deque()
        self._dragging: set[str] = set()
        self._stopped = False

    @property
    def stopped(self) -> bool:
        return self._stopped

    def post(self, intent: Intent) -> None:
        """Queue an intent for the next step.

        Raises:
            SchedulerStoppedError: The scheduler has been torn down.
            KeyError: The intent names a node that is not in the layout.
        """
        if self._stopped:
            raise SchedulerStoppedError("layout scheduler has been stopped")
        if isinstance(intent, (Hover, DragStart, DragMove, DragEnd)):
            if intent.node_id not in self.simulation.nodes:
                raise KeyError(intent.node_id)
        self._intents.append(intent)

    def on_tick(self, callback: TickCallback):
        return self.simulation.on_tick(callback)

    def step(self) -> bool:
        """Apply pending intents, then advance the simulation one tick.

        Returns:
            Whether the simulation is still running afterwards.
        """
        if self._stopped:
            raise SchedulerStoppedError("layout scheduler has been stopped")
        while self._intents:
            self._apply(self._intents.popleft())
        self.simulation.tick()
        return self.simulation.running

    def run(self, max_ticks: int | None = None) -> int:
        """Step until the simulation cools down or max_ticks steps have run.

        Returns:
            Number of steps taken.
        """
        steps = 0
        while max_ticks is None or steps < max_ticks:
            steps += 1
            if not self.step():
                break
        return steps

    def stop(self) -> None:
        """Tear down: halt the simulation and release every tick callback."""
        self.simulation.stop()
        self.simulation.clear_callbacks()
        self._intents.clear()
        self._dragging.clear()
        self._stopped = True

    def frame(self) -> Frame:
        """Snapshot current positions and emphasis as screen-space views."""
        sim_nodes = self.simulation.nodes
        nodes = []
        for node in self.graph.nodes:
            sim = sim_nodes[node.id]
            x, y = self.transform.apply(sim.x, sim.y)
            nodes.append(
                NodeView(
                    id=node.id,
                    label=node.label,
                    kind=node.kind,
                    x=x,
                    y=y,
                    radius=self.interaction.radius(node),
                    opacity=self.interaction.node_opacity(node.id),
                )
            )

        edges = []
        for edge in self.graph.edges:
            if edge.source not in sim_nodes or edge.target not in sim_nodes:
                continue
            x1, y1 = self.transform.apply(sim_nodes[edge.source].x, sim_nodes[edge.source].y)
            x2, y2 = self.transform.apply(sim_nodes[edge.target].x, sim_nodes[edge.target].y)
            edges.append(
                EdgeView(
                    source=edge.source,
                    target=edge.target,
                    relation=edge.relation,
                    x1=x1,
                    y1=y1,
                    x2=x2,
                    y2=y2,
                    opacity=self.interaction.edge_opacity(edge),
                )
            )

        tooltip = self.interaction.tooltip()
        return Frame(
            nodes=tuple(nodes),
            edges=tuple(edges),
            tooltip=tuple(tooltip) if tooltip is not None else None,
            alpha=self.simulation.alpha,
        )

    def _apply(self, intent: Intent) -> None:
        sim = self.simulation
        if isinstance(intent, Hover):
            self.interaction.hover(intent.node_id)
        elif isinstance(intent, Unhover):
            self.interaction.unhover()
        elif isinstance(intent, DragStart):
            node = sim.nodes[intent.node_id]
            # First drag heats the layout so neighbours react to the pinned node
            if not self._dragging:
                sim.alpha_target = DRAG_ALPHA_TARGET
                sim.restart()
            self._dragging.add(intent.node_id)
            sim.pin(intent.node_id, node.x, node.y)
        elif isinstance(intent, DragMove):
            if intent.node_id in self._dragging:
                sim.pin(intent.node_id, *self.transform.invert(intent.x, intent.y))
        elif isinstance(intent, DragEnd):
            self._dragging.discard(intent.node_id)
            if not self._dragging:
                sim.alpha_target = 0.0
            sim.unpin(intent.node_id)
        elif isinstance(intent, Zoom):
            self.transform = self.transform.scale_by(intent.factor, about=(intent.x, intent.y))
        elif isinstance(intent, Pan):
            self.transform = self.transform.translate_by(intent.dx, intent.dy)
        logger.debug("Applied %r", intent)
