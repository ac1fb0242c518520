"""Shared fixtures for family tree tests."""

import pytest

from family import FamilyTree
from models import ParentRole, Person


def make_tree(*ids: str) -> FamilyTree:
    tree = FamilyTree()
    for person_id in ids:
        tree.add_person(Person(id=person_id, name=f"Person {person_id}"))
    return tree


@pytest.fixture
def tree():
    """Persons A, B, C with no relationships."""
    return make_tree("A", "B", "C")


@pytest.fixture
def three_generations():
    """
    G (father) + H (mother)
      -> P (father) + Q (mother, married in)
           -> K1, K2
      -> U (uncle), unmarried
    Z is not connected to anyone.
    """
    t = FamilyTree()
    t.add_persons(
        [
            Person(id="G", name="Grandpa", sex="M"),
            Person(id="H", name="Grandma", sex="F"),
            Person(id="P", name="Paul", sex="M"),
            Person(id="U", name="Uncle", sex="M"),
            Person(id="Q", name="Quinn", sex="F"),
            Person(id="K1", name="Kid One", sex="F", birth_order=1),
            Person(id="K2", name="Kid Two", sex="M", birth_order=2),
            Person(id="Z", name="Stranger"),
        ]
    )
    t.add_spouse_edge("G", "H")
    for child in ("P", "U"):
        t.add_parent_edge("G", child, ParentRole.FATHER)
        t.add_parent_edge("H", child, ParentRole.MOTHER)
    t.add_spouse_edge("P", "Q")
    for child in ("K1", "K2"):
        t.add_parent_edge("P", child, ParentRole.FATHER)
        t.add_parent_edge("Q", child, ParentRole.MOTHER)
    return t
