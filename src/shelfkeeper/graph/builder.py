# ABOUTME: Derives the books/authors/categories/students relationship graph from snapshots.
# ABOUTME: Pure function of its inputs; node ids are stable "<kind>-<key>" strings.

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Literal

from shelfkeeper.db.catalog import LibraryCatalog
from shelfkeeper.db.mapping import BookRecord, StudentRecord
from shelfkeeper.db.roster import StudentRoster
from shelfkeeper.errors import ShelfkeeperError, StorageError

NodeKind = Literal["book", "author", "category", "student"]
Relation = Literal["written-by", "belongs-to", "borrowed"]


class GraphLoadError(ShelfkeeperError):
    """Raised when a snapshot needed for the graph could not be read."""


@dataclass(frozen=True)
class GraphNode:
    """One entity in the relationship graph.

    metadata points back at the BookRecord or StudentRecord the node was
    derived from; authors and categories have none.
    """

    id: str
    label: str
    kind: NodeKind
    metadata: BookRecord | StudentRecord | None = field(default=None, compare=False)


@dataclass(frozen=True)
class GraphEdge:
    source: str
    target: str
    relation: Relation


@dataclass
class LibraryGraph:
    """Nodes and edges of a derived graph, in derivation order."""

    nodes: list[GraphNode] = field(default_factory=list)
    edges: list[GraphEdge] = field(default_factory=list)

    @property
    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get(self, node_id: str) -> GraphNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def neighbors(self, node_id: str) -> set[str]:
        """Ids of nodes exactly one edge away from node_id, in either direction."""
        adjacent: set[str] = set()
        for edge in self.edges:
            if edge.source == node_id:
                adjacent.add(edge.target)
            if edge.target == node_id:
                adjacent.add(edge.source)
        adjacent.discard(node_id)
        return adjacent


def node_id(kind: NodeKind, key: object) -> str:
    return f"{kind}-{key}"


def build_graph(books: Iterable[BookRecord], students: Iterable[StudentRecord]) -> LibraryGraph:
    """Derive the relationship graph from a catalog and roster snapshot.

    Every book gets a node plus written-by and belongs-to edges to a single
    shared node per distinct author and category string. Only students who
    are currently borrowing appear, each with a borrowed edge to the book.

    Node order: books in input order, each book's author and category the
    first time they are seen, then borrowing students in input order.
    """
    graph = LibraryGraph()
    seen: set[str] = set()

    def add_node(node: GraphNode) -> None:
        if node.id not in seen:
            seen.add(node.id)
            graph.nodes.append(node)

    for book in books:
        book_node = node_id("book", book.id)
        add_node(GraphNode(id=book_node, label=book.title, kind="book", metadata=book))

        author_node = node_id("author", book.author)
        add_node(GraphNode(id=author_node, label=book.author, kind="author"))
        graph.edges.append(GraphEdge(book_node, author_node, "written-by"))

        category_node = node_id("category", book.category)
        add_node(GraphNode(id=category_node, label=book.category, kind="category"))
        graph.edges.append(GraphEdge(book_node, category_node, "belongs-to"))

    for student in students:
        if not student.is_borrowing or student.borrowed_book_id is None:
            continue
        student_node = node_id("student", student.id)
        add_node(GraphNode(id=student_node, label=student.name, kind="student", metadata=student))
        graph.edges.append(
            GraphEdge(student_node, node_id("book", student.borrowed_book_id), "borrowed")
        )

    return graph


def load_graph(catalog: LibraryCatalog, roster: StudentRoster) -> LibraryGraph:
    """Read both snapshots and derive the graph.

    Raises:
        GraphLoadError: If either snapshot fails. No partial graph is built.
    """
    try:
        books = catalog.list_all()
        students = roster.list_all()
    except StorageError as exc:
        raise GraphLoadError(f"Failed to load graph data: {exc}") from exc
    return build_graph(books, students)
