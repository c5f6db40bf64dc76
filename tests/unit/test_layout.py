# ABOUTME: Unit tests for the force-directed layout simulation.
# ABOUTME: Validates cooling schedule, spacing, centering, pinning, and tick callbacks.

import itertools
import math

from shelfkeeper.graph.builder import GraphEdge, GraphNode, LibraryGraph
from shelfkeeper.graph.layout import ForceSimulation


def _run(sim: ForceSimulation, limit: int = 1000) -> None:
    while sim.running and sim.ticks < limit:
        sim.tick()


class TestCooling:
    def test_comes_to_rest_after_about_300_ticks(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        _run(sim)
        assert not sim.running
        assert 295 <= sim.ticks <= 305
        assert sim.alpha < sim.alpha_min

    def test_stopped_simulation_does_not_move(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        sim.stop()
        before = sim.positions()
        sim.tick()
        assert sim.positions() == before
        assert sim.ticks == 0

    def test_restart_resumes(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        sim.stop()
        sim.restart().tick()
        assert sim.ticks == 1

    def test_same_seed_same_layout(self, sample_graph: LibraryGraph) -> None:
        first = ForceSimulation(sample_graph.nodes, sample_graph.edges, seed=3)
        second = ForceSimulation(sample_graph.nodes, sample_graph.edges, seed=3)
        _run(first)
        _run(second)
        assert first.positions() == second.positions()


class TestRestingLayout:
    """Properties of the layout once it has cooled."""

    def test_centered(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges, width=800, height=400)
        _run(sim)
        xs = [x for x, _ in sim.positions().values()]
        ys = [y for _, y in sim.positions().values()]
        assert math.isclose(sum(xs) / len(xs), 400, abs_tol=5)
        assert math.isclose(sum(ys) / len(ys), 200, abs_tol=5)

    def test_nodes_do_not_overlap(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        _run(sim)
        for a, b in itertools.combinations(sim.positions().values(), 2):
            assert math.dist(a, b) > 30

    def test_linked_nodes_near_link_distance(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        _run(sim)
        positions = sim.positions()
        for edge in sample_graph.edges:
            distance = math.dist(positions[edge.source], positions[edge.target])
            assert 50 < distance < 300

    def test_all_positions_finite(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        _run(sim)
        assert all(math.isfinite(x) and math.isfinite(y) for x, y in sim.positions().values())


class TestPinning:
    def test_pinned_node_stays_put(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        sim.pin("book-1", 100.0, 50.0)
        for _ in range(20):
            sim.tick()
        assert sim.positions()["book-1"] == (100.0, 50.0)
        assert sim.nodes["book-1"].pinned

    def test_unpin_releases(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        sim.pin("book-1", 100.0, 50.0)
        sim.tick()
        sim.unpin("book-1")
        assert not sim.nodes["book-1"].pinned
        for _ in range(20):
            sim.tick()
        assert sim.positions()["book-1"] != (100.0, 50.0)


class TestCallbacks:
    def test_called_every_tick(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        seen: list[int] = []
        sim.on_tick(lambda s: seen.append(s.ticks))
        for _ in range(3):
            sim.tick()
        assert seen == [1, 2, 3]

    def test_unsubscribe(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        seen: list[int] = []
        unsubscribe = sim.on_tick(lambda s: seen.append(s.ticks))
        sim.tick()
        unsubscribe()
        unsubscribe()
        sim.tick()
        assert seen == [1]

    def test_clear_callbacks(self, sample_graph: LibraryGraph) -> None:
        sim = ForceSimulation(sample_graph.nodes, sample_graph.edges)
        seen: list[int] = []
        sim.on_tick(lambda s: seen.append(s.ticks))
        sim.clear_callbacks()
        sim.tick()
        assert seen == []


class TestEdgeCases:
    def test_empty_graph(self) -> None:
        sim = ForceSimulation([], [])
        _run(sim)
        assert sim.positions() == {}
        assert not sim.running

    def test_dangling_edge_ignored(self) -> None:
        nodes = [GraphNode(id="student-1", label="Asha", kind="student")]
        edges = [GraphEdge("student-1", "book-7", "borrowed")]
        sim = ForceSimulation(nodes, edges)
        _run(sim)
        assert set(sim.positions()) == {"student-1"}

    def test_single_node_sits_at_center(self) -> None:
        sim = ForceSimulation(
            [GraphNode(id="book-1", label="Dune", kind="book")], [], width=200, height=100
        )
        _run(sim)
        x, y = sim.positions()["book-1"]
        assert math.isclose(x, 100, abs_tol=1)
        assert math.isclose(y, 50, abs_tol=1)
