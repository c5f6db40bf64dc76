# ABOUTME: Force-directed layout for the relationship graph.
# ABOUTME: Repulsion, edge springs, centering, and collision, cooled by a decaying alpha.

import math
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from shelfkeeper.graph.builder import GraphEdge, GraphNode

DEFAULT_WIDTH = 960.0
DEFAULT_HEIGHT = 600.0
CHARGE_STRENGTH = -300.0
LINK_DISTANCE = 100.0
COLLIDE_RADIUS = 30.0
ALPHA_MIN = 0.001
VELOCITY_DECAY = 0.4
DRAG_ALPHA_TARGET = 0.3

# Seed spiral for nodes with no position yet
_INITIAL_RADIUS = 10.0
_INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))

TickCallback = Callable[["ForceSimulation"], None]


@dataclass
class SimNode:
    """Mutable physics state for one graph node.

    fx/fy pin the node: while set, the node sits exactly there and ignores
    every force.
    """

    id: str
    index: int
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None or self.fy is not None


@dataclass
class _SimLink:
    source: SimNode
    target: SimNode
    strength: float
    bias: float


class ForceSimulation:
    """Iterative 2-D layout of a graph.

    Each tick nudges alpha toward alpha_target, applies the forces scaled by
    alpha, then integrates velocities. The simulation stops itself once alpha
    falls below alpha_min; restart() wakes it back up.

    Edges whose endpoints are not both present are ignored.
    """

    def __init__(
        self,
        nodes: Iterable[GraphNode],
        edges: Iterable[GraphEdge],
        *,
        width: float = DEFAULT_WIDTH,
        height: float = DEFAULT_HEIGHT,
        charge_strength: float = CHARGE_STRENGTH,
        link_distance: float = LINK_DISTANCE,
        collide_radius: float = COLLIDE_RADIUS,
        alpha_min: float = ALPHA_MIN,
        velocity_decay: float = VELOCITY_DECAY,
        seed: int = 0,
    ) -> None:
        self.center = (width / 2, height / 2)
        self.charge_strength = charge_strength
        self.link_distance = link_distance
        self.collide_radius = collide_radius
        self.alpha = 1.0
        self.alpha_min = alpha_min
        self.alpha_decay = 1 - alpha_min ** (1 / 300)
        self.alpha_target = 0.0
        self.velocity_decay = velocity_decay
        self.ticks = 0
        self._random = random.Random(seed)
        self._running = True
        self._callbacks: list[TickCallback] = []

        self.nodes: dict[str, SimNode] = {}
        for index, node in enumerate(nodes):
            radius = _INITIAL_RADIUS * math.sqrt(0.5 + index)
            angle = index * _INITIAL_ANGLE
            self.nodes[node.id] = SimNode(
                id=node.id,
                index=index,
                x=self.center[0] + radius * math.cos(angle),
                y=self.center[1] + radius * math.sin(angle),
            )

        self._links = self._init_links(edges)

    def _init_links(self, edges: Iterable[GraphEdge]) -> list[_SimLink]:
        pairs = [
            (self.nodes[e.source], self.nodes[e.target])
            for e in edges
            if e.source in self.nodes and e.target in self.nodes
        ]
        degree: dict[str, int] = {}
        for source, target in pairs:
            degree[source.id] = degree.get(source.id, 0) + 1
            degree[target.id] = degree.get(target.id, 0) + 1

        links = []
        for source, target in pairs:
            ds, dt = degree[source.id], degree[target.id]
            # Springs on busy nodes are softer; the lighter end moves more.
            links.append(
                _SimLink(source, target, strength=1 / min(ds, dt), bias=ds / (ds + dt))
            )
        return links

    @property
    def running(self) -> bool:
        return self._running

    def positions(self) -> dict[str, tuple[float, float]]:
        return {node.id: (node.x, node.y) for node in self.nodes.values()}

    def on_tick(self, callback: TickCallback) -> Callable[[], None]:
        """Register a callback run after every tick.

        Returns:
            A function that unregisters the callback.
        """
        self._callbacks.append(callback)

        def unsubscribe() -> None:
            if callback in self._callbacks:
                self._callbacks.remove(callback)

        return unsubscribe

    def clear_callbacks(self) -> None:
        self._callbacks.clear()

    def restart(self) -> "ForceSimulation":
        self._running = True
        return self

    def stop(self) -> "ForceSimulation":
        self._running = False
        return self

    def pin(self, node_id: str, x: float, y: float) -> None:
        node = self.nodes[node_id]
        node.fx, node.fy = x, y

    def unpin(self, node_id: str) -> None:
        node = self.nodes[node_id]
        node.fx = node.fy = None

    def tick(self) -> None:
        """Advance the layout by one step and notify tick callbacks.

        Does nothing once the simulation has stopped.
        """
        if not self._running:
            return

        self.alpha += (self.alpha_target - self.alpha) * self.alpha_decay

        self._apply_links()
        self._apply_charge()
        self._apply_center()
        self._apply_collision()

        keep = 1 - self.velocity_decay
        for node in self.nodes.values():
            if node.fx is None:
                node.vx *= keep
                node.x += node.vx
            else:
                node.x, node.vx = node.fx, 0.0
            if node.fy is None:
                node.vy *= keep
                node.y += node.vy
            else:
                node.y, node.vy = node.fy, 0.0

        self.ticks += 1
        for callback in list(self._callbacks):
            callback(self)

        if self.alpha < self.alpha_min:
            self._running = False

    def _jiggle(self) -> float:
        """Tiny random offset for coincident nodes so forces have a direction."""
        return (self._random.random() - 0.5) * 1e-6

    def _apply_links(self) -> None:
        for link in self._links:
            source, target = link.source, link.target
            dx = (target.x + target.vx - source.x - source.vx) or self._jiggle()
            dy = (target.y + target.vy - source.y - source.vy) or self._jiggle()
            dist = math.hypot(dx, dy)
            k = (dist - self.link_distance) / dist * self.alpha * link.strength
            dx, dy = dx * k, dy * k
            target.vx -= dx * link.bias
            target.vy -= dy * link.bias
            source.vx += dx * (1 - link.bias)
            source.vy += dy * (1 - link.bias)

    def _apply_charge(self) -> None:
        nodes = list(self.nodes.values())
        for node in nodes:
            for other in nodes:
                if other is node:
                    continue
                dx = (other.x - node.x) or self._jiggle()
                dy = (other.y - node.y) or self._jiggle()
                dist2 = dx * dx + dy * dy
                if dist2 < 1:
                    dist2 = math.sqrt(dist2)
                weight = self.charge_strength * self.alpha / dist2
                node.vx += dx * weight
                node.vy += dy * weight

    def _apply_center(self) -> None:
        if not self.nodes:
            return
        count = len(self.nodes)
        shift_x = sum(n.x for n in self.nodes.values()) / count - self.center[0]
        shift_y = sum(n.y for n in self.nodes.values()) / count - self.center[1]
        for node in self.nodes.values():
            node.x -= shift_x
            node.y -= shift_y

    def _apply_collision(self) -> None:
        nodes = list(self.nodes.values())
        min_dist = 2 * self.collide_radius
        for i, node in enumerate(nodes):
            for other in nodes[i + 1:]:
                dx = (node.x + node.vx - other.x - other.vx) or self._jiggle()
                dy = (node.y + node.vy - other.y - other.vy) or self._jiggle()
                dist = math.hypot(dx, dy)
                if dist >= min_dist:
                    continue
                # Equal radii: split the overlap evenly between the pair.
                k = (min_dist - dist) / dist * 0.5
                node.vx += dx * k
                node.vy += dy * k
                other.vx -= dx * k
                other.vy -= dy * k
