"""Relationship graph over the person registry, stored in NetworkX graphs."""

from collections import deque
from dataclasses import replace

import networkx as nx

from errors import (
    CycleError,
    NotFoundError,
    RoleConflictError,
    SelfRelationshipError,
    UnknownPersonError,
)
from log import get_logger
from models import ParentRole, Person, Relationship, RelationshipType
from registry import PersonRegistry

logger = get_logger(__name__)


class EdgeIndex:
    """
    Read-only queries shared by the live graph and its snapshots.

    Parent edges live in a DiGraph (parent -> child, with a ``role`` attribute) and
    spouse edges in an undirected Graph. Nodes are person ids only; person records are
    resolved through the registry.
    """

    _parents: nx.DiGraph
    _spouses: nx.Graph

    def _creation_order(self, person_id: str) -> int:
        raise NotImplementedError

    def _require(self, person_id: str) -> None:
        raise NotImplementedError

    def parents_of(self, person_id: str) -> dict[ParentRole, str]:
        """Return the 0-2 parents of a person keyed by role, father first."""
        self._require(person_id)
        found: dict[ParentRole, str] = {}
        if person_id in self._parents:
            for parent in self._parents.predecessors(person_id):
                found[self._parents.edges[parent, person_id]["role"]] = parent
        return {role: found[role] for role in ParentRole if role in found}

    def children_of(self, person_id: str) -> list[str]:
        """Children of a person, ordered by the child's creation order."""
        self._require(person_id)
        if person_id not in self._parents:
            return []
        return sorted(self._parents.successors(person_id), key=self._creation_order)

    def spouses_of(self, person_id: str) -> list[str]:
        """Current spouses of a person, in the order the spouse edges were added."""
        self._require(person_id)
        if person_id not in self._spouses:
            return []
        return list(self._spouses.neighbors(person_id))

    def has_relationships(self, person_id: str) -> bool:
        return (person_id in self._parents and self._parents.degree(person_id) > 0) or (
            person_id in self._spouses and self._spouses.degree(person_id) > 0
        )

    def has_edge(self, edge: Relationship) -> bool:
        if edge.relationship_type == RelationshipType.SPOUSE_OF:
            return self._spouses.has_edge(edge.person1_id, edge.person2_id)
        if not self._parents.has_edge(edge.person1_id, edge.person2_id):
            return False
        role = self._parents.edges[edge.person1_id, edge.person2_id]["role"]
        return edge.role is None or edge.role == role

    def edge_count(self) -> int:
        return self._parents.number_of_edges() + self._spouses.number_of_edges()

    def edges(self) -> list[Relationship]:
        """All edges: parent edges first, then spouse edges, in creation order of their ends."""
        parent_edges = sorted(
            (
                Relationship.parent(u, v, data["role"])
                for u, v, data in self._parents.edges(data=True)
            ),
            key=lambda r: (self._creation_order(r.person1_id), self._creation_order(r.person2_id)),
        )
        spouse_edges = []
        for u, v in self._spouses.edges():
            a, b = sorted((u, v), key=self._creation_order)
            spouse_edges.append(Relationship.spouse(a, b))
        spouse_edges.sort(
            key=lambda r: (self._creation_order(r.person1_id), self._creation_order(r.person2_id))
        )
        return parent_edges + spouse_edges


class RelationshipGraph(EdgeIndex):
    """
    Parent-of and spouse-of edges layered over a ``PersonRegistry``.

    Every mutation validates fully before writing, so a rejected mutation leaves the
    graph unchanged.
    """

    def __init__(self, registry: PersonRegistry):
        self.registry = registry
        self._parents = nx.DiGraph()
        self._spouses = nx.Graph()
        registry.add_reference_check(self.has_relationships)

    def _creation_order(self, person_id: str) -> int:
        return self.registry.creation_order(person_id)

    def _require(self, person_id: str) -> None:
        if person_id not in self.registry:
            raise UnknownPersonError(person_id)

    def _would_create_cycle(self, parent_id: str, child_id: str) -> bool:
        """Walk the ancestors of ``parent_id`` looking for ``child_id``."""
        if parent_id == child_id:
            return True
        if parent_id not in self._parents:
            return False
        # Bounded by the registry size so a corrupted graph still terminates
        max_depth = len(self.registry)
        seen = {parent_id}
        frontier = deque([(parent_id, 0)])
        while frontier:
            current, depth = frontier.popleft()
            if depth >= max_depth:
                continue
            for ancestor in self._parents.predecessors(current):
                if ancestor == child_id:
                    return True
                if ancestor not in seen:
                    seen.add(ancestor)
                    frontier.append((ancestor, depth + 1))
        return False

    def add_parent_edge(self, parent_id: str, child_id: str, role: ParentRole | str) -> Relationship:
        role = ParentRole(role)
        self._require(parent_id)
        self._require(child_id)

        if self._parents.has_edge(parent_id, child_id):
            existing_role = self._parents.edges[parent_id, child_id]["role"]
            raise RoleConflictError(child_id, existing_role.value, parent_id)
        existing = self.parents_of(child_id).get(role)
        if existing is not None:
            logger.info("parent_edge_rejected", reason="role_conflict", parent_id=parent_id, child_id=child_id)
            raise RoleConflictError(child_id, role.value, existing)
        if self._would_create_cycle(parent_id, child_id):
            logger.info("parent_edge_rejected", reason="cycle", parent_id=parent_id, child_id=child_id)
            raise CycleError(parent_id, child_id)

        self._parents.add_edge(parent_id, child_id, role=role)
        logger.debug("parent_edge_added", parent_id=parent_id, child_id=child_id, role=role.value)
        return Relationship.parent(parent_id, child_id, role)

    def add_spouse_edge(self, a: str, b: str) -> Relationship:
        self._require(a)
        self._require(b)
        if a == b:
            raise SelfRelationshipError(a)
        if not self._spouses.has_edge(a, b):
            self._spouses.add_edge(a, b)
            logger.debug("spouse_edge_added", person_id=a, spouse_id=b)
        return Relationship.spouse(a, b)

    def remove_edge(self, edge: Relationship) -> None:
        if not self.has_edge(edge):
            raise NotFoundError(f"Relationship not found: {edge}", edge)
        u, v = edge.person1_id, edge.person2_id
        if edge.relationship_type == RelationshipType.SPOUSE_OF:
            # One undirected edge backs both directions
            self._spouses.remove_edge(u, v)
            self._prune(self._spouses, u, v)
        else:
            self._parents.remove_edge(u, v)
            self._prune(self._parents, u, v)
        logger.debug("edge_removed", kind=edge.relationship_type.value, person1_id=u, person2_id=v)

    @staticmethod
    def _prune(g: nx.Graph, *nodes: str) -> None:
        for n in nodes:
            if g.degree(n) == 0:
                g.remove_node(n)

    def snapshot(self) -> "GraphSnapshot":
        """Copy the current persons and edges for a read-only traversal."""
        return GraphSnapshot(
            persons={p.id: replace(p, metadata=dict(p.metadata)) for p in self.registry.list_persons()},
            order=self.registry.order_snapshot(),
            parents=self._parents.copy(),
            spouses=self._spouses.copy(),
        )


class GraphSnapshot(EdgeIndex):
    """A detached copy of the registry order and edges at one point in time."""

    def __init__(
        self,
        persons: dict[str, Person],
        order: dict[str, int],
        parents: nx.DiGraph,
        spouses: nx.Graph,
    ):
        self.persons = persons
        self.order = order
        self._parents = parents
        self._spouses = spouses

    def __contains__(self, person_id: str) -> bool:
        return person_id in self.persons

    def __len__(self) -> int:
        return len(self.persons)

    def _creation_order(self, person_id: str) -> int:
        return self.order[person_id]

    def _require(self, person_id: str) -> None:
        if person_id not in self.persons:
            raise UnknownPersonError(person_id)

    def parent_graph(self) -> nx.DiGraph:
        return self._parents


def build_union_layout_graph(G: nx.DiGraph) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model.

    Creates "family nodes" (union nodes) that connect spouse pairs to their children:
    - Spouses both point at their shared family node
    - Children hang from the family node of their recorded parents
    - A child whose parents are not married (or who has one recorded parent) gets a
      family node of its own parents

    Args:
        G: Graph with person nodes and PARENT_OF (parent -> child, with ``role``) and
           SPOUSE_OF edges

    Returns:
        A new graph with ``node_type`` "person"/"family" and ``edge_type``
        "spouse_to_family"/"family_to_child"
    """
    H = nx.DiGraph()

    for n, data in G.nodes(data=True):
        H.add_node(n, node_type="person", **data)

    fam_for_pair: dict[frozenset, str] = {}
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") != RelationshipType.SPOUSE_OF.value:
            continue
        fam_id = f"FAM_{u}_{v}"
        fam_for_pair[frozenset((u, v))] = fam_id
        H.add_node(fam_id, node_type="family", spouses=(u, v))
        H.add_edge(u, fam_id, edge_type="spouse_to_family")
        H.add_edge(v, fam_id, edge_type="spouse_to_family")

    # Father before mother so family ids are stable
    parents_by_child: dict[str, list[tuple[str, str]]] = {}
    for u, v, edata in G.edges(data=True):
        if edata.get("relationship_type") == RelationshipType.PARENT_OF.value:
            parents_by_child.setdefault(v, []).append((edata.get("role", ""), u))

    for child, tagged in parents_by_child.items():
        parents = [p for _, p in sorted(tagged, key=lambda t: t[0] != ParentRole.FATHER.value)]

        fam_id = fam_for_pair.get(frozenset(parents)) if len(parents) == 2 else None
        if fam_id is None:
            fam_id = f"FAM_{'_'.join(parents)}"
            if fam_id not in H:
                H.add_node(fam_id, node_type="family", spouses=tuple(parents))
                for p in parents:
                    H.add_edge(p, fam_id, edge_type="spouse_to_family")

        H.add_edge(fam_id, child, edge_type="family_to_child")

    return H
