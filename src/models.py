"""Data classes for family tree entities and layout results."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RelationshipType(str, Enum):
    PARENT_OF = "PARENT_OF"
    SPOUSE_OF = "SPOUSE_OF"


class ParentRole(str, Enum):
    FATHER = "father"
    MOTHER = "mother"


@dataclass
class Person:
    id: str
    name: str
    sex: str | None = None  # "M", "F" or None
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    birth_order: int | None = None
    media: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class Relationship:
    """
    A reference to one edge of the relationship graph.

    PARENT_OF edges point from person1 (the parent) to person2 (the child) and carry
    a role. SPOUSE_OF edges are symmetric; (a, b) and (b, a) name the same edge.
    """

    person1_id: str
    person2_id: str
    relationship_type: RelationshipType
    role: ParentRole | None = None

    @classmethod
    def parent(cls, parent_id: str, child_id: str, role: ParentRole | str) -> "Relationship":
        return cls(parent_id, child_id, RelationshipType.PARENT_OF, ParentRole(role))

    @classmethod
    def spouse(cls, a: str, b: str) -> "Relationship":
        return cls(a, b, RelationshipType.SPOUSE_OF)


@dataclass(frozen=True)
class LayoutNode:
    person_id: str
    generation: int
    x: float
    y: float


@dataclass(frozen=True)
class LayoutResult:
    """Immutable output of a projection: positioned nodes plus the visible edges."""

    root_id: str
    nodes: tuple[LayoutNode, ...]
    edges: tuple[Relationship, ...]
    node_separation: float
    level_separation: float

    def node(self, person_id: str) -> LayoutNode | None:
        for n in self.nodes:
            if n.person_id == person_id:
                return n
        return None

    def generation(self, generation: int) -> list[LayoutNode]:
        return [n for n in self.nodes if n.generation == generation]

    @property
    def person_ids(self) -> list[str]:
        return [n.person_id for n in self.nodes]
