"""Person registry: identity-keyed storage for person records."""

from collections.abc import Callable, ValuesView
import itertools

from errors import DuplicateIdError, HasRelationshipsError, NotFoundError
from log import get_logger
from models import Person

logger = get_logger(__name__)


class PersonRegistry:
    """
    Canonical person records keyed by id, kept in insertion order.

    The registry knows nothing about relationships. A relationship graph built on top of
    it installs a reference check so that persons still taking part in an edge cannot be
    removed.
    """

    def __init__(self):
        self._persons: dict[str, Person] = {}
        self._order: dict[str, int] = {}
        self._counter = itertools.count()
        self._reference_checks: list[Callable[[str], bool]] = []

    def __contains__(self, person_id: str) -> bool:
        return person_id in self._persons

    def __len__(self) -> int:
        return len(self._persons)

    def add_reference_check(self, check: Callable[[str], bool]) -> None:
        """Register a predicate that returns True while a person is still referenced."""
        self._reference_checks.append(check)

    def add_person(self, person: Person) -> Person:
        if person.id in self._persons:
            raise DuplicateIdError(person.id)
        self._persons[person.id] = person
        self._order[person.id] = next(self._counter)
        logger.debug("person_added", person_id=person.id)
        return person

    def get_person(self, person_id: str) -> Person:
        try:
            return self._persons[person_id]
        except KeyError:
            raise NotFoundError(f"Person not found: {person_id}", person_id) from None

    def remove_person(self, person_id: str) -> None:
        if person_id not in self._persons:
            raise NotFoundError(f"Person not found: {person_id}", person_id)
        if any(check(person_id) for check in self._reference_checks):
            raise HasRelationshipsError(person_id)
        del self._persons[person_id]
        del self._order[person_id]
        logger.debug("person_removed", person_id=person_id)

    def list_persons(self) -> ValuesView[Person]:
        """Lazy, re-iterable view over all persons in insertion order."""
        return self._persons.values()

    def creation_order(self, person_id: str) -> int:
        return self._order[person_id]

    def order_snapshot(self) -> dict[str, int]:
        return dict(self._order)
