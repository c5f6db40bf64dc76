# ABOUTME: Unit tests for hover emphasis, tooltips, node sizing, and the zoom transform.
# ABOUTME: Validates opacities with and without a hovered node, and zoom clamping.

import math

import pytest

from shelfkeeper.graph.builder import GraphEdge, LibraryGraph
from shelfkeeper.graph.interaction import (
    DIMMED_EDGE_OPACITY,
    DIMMED_NODE_OPACITY,
    EDGE_OPACITY,
    HIGHLIGHTED_EDGE_OPACITY,
    NODE_OPACITY,
    InteractionState,
    ZoomTransform,
    node_radius,
    tooltip_lines,
)


class TestHover:
    """Tests for InteractionState hover emphasis."""

    def test_idle_state(self, sample_graph: LibraryGraph) -> None:
        state = InteractionState(sample_graph)
        assert all(state.node_opacity(n.id) == NODE_OPACITY for n in sample_graph.nodes)
        assert all(state.edge_opacity(e) == EDGE_OPACITY for e in sample_graph.edges)
        assert state.tooltip() is None

    def test_hover_dims_everything_outside_neighborhood(
        self, sample_graph: LibraryGraph
    ) -> None:
        state = InteractionState(sample_graph)
        state.hover("book-1")

        assert state.dimmed_nodes() == {"book-2", "author-Jane Austen", "category-Fiction"}
        assert state.node_opacity("book-1") == NODE_OPACITY
        assert state.node_opacity("student-1") == NODE_OPACITY
        assert state.node_opacity("book-2") == DIMMED_NODE_OPACITY

    def test_hover_lights_incident_edges_only(self, sample_graph: LibraryGraph) -> None:
        state = InteractionState(sample_graph)
        state.hover("book-1")

        for edge in sample_graph.edges:
            expected = (
                HIGHLIGHTED_EDGE_OPACITY
                if "book-1" in (edge.source, edge.target)
                else DIMMED_EDGE_OPACITY
            )
            assert state.edge_opacity(edge) == expected
        assert state.dimmed_edges() == [
            GraphEdge("book-2", "author-Jane Austen", "written-by"),
            GraphEdge("book-2", "category-Fiction", "belongs-to"),
        ]

    def test_unhover_restores(self, sample_graph: LibraryGraph) -> None:
        state = InteractionState(sample_graph)
        state.hover("student-1")
        state.unhover()
        assert state.dimmed_nodes() == set()
        assert state.dimmed_edges() == []
        assert state.hovered is None

    def test_hover_unknown_node(self, sample_graph: LibraryGraph) -> None:
        state = InteractionState(sample_graph)
        with pytest.raises(KeyError):
            state.hover("book-99")

    def test_hovered_node_grows(self, sample_graph: LibraryGraph) -> None:
        state = InteractionState(sample_graph)
        book = sample_graph.get("book-1")
        author = sample_graph.get("author-Frank Herbert")
        assert book is not None and author is not None

        assert state.radius(book) == 12
        assert state.radius(author) == 10
        state.hover("book-1")
        assert state.radius(book) == 16
        assert state.radius(author) == 10


class TestTooltip:
    def test_book(self, sample_graph: LibraryGraph) -> None:
        node = sample_graph.get("book-1")
        assert node is not None
        assert tooltip_lines(node) == [
            "Dune",
            "Type: book",
            "Author: Frank Herbert",
            "Available: 1",
        ]

    def test_student(self, sample_graph: LibraryGraph) -> None:
        node = sample_graph.get("student-1")
        assert node is not None
        assert tooltip_lines(node) == ["Asha", "Type: student", "Days borrowed: 3"]

    def test_category(self, sample_graph: LibraryGraph) -> None:
        node = sample_graph.get("category-Fiction")
        assert node is not None
        assert tooltip_lines(node) == ["Fiction", "Type: category"]

    def test_follows_hover(self, sample_graph: LibraryGraph) -> None:
        state = InteractionState(sample_graph)
        state.hover("author-Jane Austen")
        assert state.tooltip() == ["Jane Austen", "Type: author"]

    def test_radius_helper(self, sample_graph: LibraryGraph) -> None:
        student = sample_graph.get("student-1")
        assert student is not None
        assert node_radius(student) == 10
        assert node_radius(student, hovered=True) == 14


class TestZoomTransform:
    """Tests for the scale-then-translate view transform."""

    def test_identity(self) -> None:
        assert ZoomTransform().apply(3.0, 4.0) == (3.0, 4.0)

    def test_apply_and_invert(self) -> None:
        transform = ZoomTransform(k=2.0, x=10.0, y=-5.0)
        assert transform.apply(3.0, 4.0) == (16.0, 3.0)
        assert transform.invert(16.0, 3.0) == (3.0, 4.0)

    @pytest.mark.parametrize(
        ("factor", "expected"), [(10.0, 3.0), (0.01, 0.5), (2.0, 2.0)]
    )
    def test_zoom_clamped(self, factor: float, expected: float) -> None:
        assert ZoomTransform().scale_by(factor).k == expected

    def test_zoom_keeps_anchor_fixed(self) -> None:
        before = ZoomTransform(k=1.5, x=20.0, y=10.0)
        anchor = (300.0, 200.0)
        after = before.scale_by(1.6, about=anchor)

        layout_point = before.invert(*anchor)
        sx, sy = after.apply(*layout_point)
        assert math.isclose(sx, anchor[0])
        assert math.isclose(sy, anchor[1])

    def test_pan(self) -> None:
        transform = ZoomTransform(k=2.0).translate_by(5.0, -3.0)
        assert (transform.k, transform.x, transform.y) == (2.0, 5.0, -3.0)
