"""The domain-facing family tree: person registry, relationship graph and projection."""

from collections.abc import Iterable
import threading

from graph import GraphSnapshot, RelationshipGraph
from log import get_logger
from models import LayoutResult, ParentRole, Person, Relationship
from projection import project
from registry import PersonRegistry
from settings import LayoutSettings

logger = get_logger(__name__)


class FamilyTree:
    """
    A registry of persons and the relationships between them.

    All mutations and projections are serialised with a single lock, and projections
    run on a snapshot so they never observe a half-applied mutation.

    Example:
        >>> tree = FamilyTree()
        >>> _ = tree.add_person(Person(id="A", name="Ada"))
        >>> _ = tree.add_person(Person(id="B", name="Ben"))
        >>> _ = tree.add_parent_edge("A", "B", ParentRole.MOTHER)
        >>> tree.project("A").node("B").generation
        1
    """

    def __init__(self, settings: LayoutSettings | None = None):
        self.settings = settings or LayoutSettings()
        self.registry = PersonRegistry()
        self.graph = RelationshipGraph(self.registry)
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.registry)

    def __contains__(self, person_id: str) -> bool:
        return person_id in self.registry

    # Persons

    def add_person(self, person: Person) -> Person:
        with self._lock:
            return self.registry.add_person(person)

    def add_persons(self, persons: Iterable[Person]) -> None:
        for person in persons:
            self.add_person(person)

    def get_person(self, person_id: str) -> Person:
        with self._lock:
            return self.registry.get_person(person_id)

    def remove_person(self, person_id: str) -> None:
        with self._lock:
            self.registry.remove_person(person_id)

    def list_persons(self) -> tuple[Person, ...]:
        """Persons in insertion order, copied under the lock."""
        with self._lock:
            return tuple(self.registry.list_persons())

    # Relationships

    def add_parent_edge(self, parent_id: str, child_id: str, role: ParentRole | str) -> Relationship:
        with self._lock:
            return self.graph.add_parent_edge(parent_id, child_id, role)

    def add_spouse_edge(self, a: str, b: str) -> Relationship:
        with self._lock:
            return self.graph.add_spouse_edge(a, b)

    def remove_edge(self, edge: Relationship) -> None:
        with self._lock:
            self.graph.remove_edge(edge)

    def parents_of(self, person_id: str) -> dict[ParentRole, str]:
        with self._lock:
            return self.graph.parents_of(person_id)

    def children_of(self, person_id: str) -> list[str]:
        with self._lock:
            return self.graph.children_of(person_id)

    def spouses_of(self, person_id: str) -> list[str]:
        with self._lock:
            return self.graph.spouses_of(person_id)

    def edge_count(self) -> int:
        with self._lock:
            return self.graph.edge_count()

    # Projection

    def snapshot(self) -> GraphSnapshot:
        with self._lock:
            return self.graph.snapshot()

    def project(self, root_id: str) -> LayoutResult:
        snapshot = self.snapshot()
        logger.info("projecting_tree", root_id=root_id, persons=len(snapshot))
        return project(snapshot, root_id, self.settings)
