"""Error kinds raised by the family tree registry, graph and projector."""


class FamilyTreeError(Exception):
    """Base class for all recoverable family tree errors."""


class NotFoundError(FamilyTreeError):
    """A person or relationship does not exist."""

    def __init__(self, message: str, key=None):
        super().__init__(message)
        self.key = key


class UnknownPersonError(NotFoundError):
    """A relationship refers to a person that is not in the registry."""

    def __init__(self, person_id: str):
        super().__init__(f"Unknown person: {person_id}", person_id)
        self.person_id = person_id


class UnknownRootError(NotFoundError):
    """A projection was requested for a root that is not in the registry."""

    def __init__(self, root_id: str):
        super().__init__(f"Unknown root person: {root_id}", root_id)
        self.root_id = root_id


class DuplicateIdError(FamilyTreeError):
    def __init__(self, person_id: str):
        super().__init__(f"Person already exists: {person_id}")
        self.person_id = person_id


class RoleConflictError(FamilyTreeError):
    def __init__(self, child_id: str, role: str, existing_id: str):
        super().__init__(f"{child_id} already has a {role} parent edge from {existing_id}")
        self.child_id = child_id
        self.role = role
        self.existing_id = existing_id


class CycleError(FamilyTreeError):
    """The parent edge would make a person their own ancestor."""

    def __init__(self, parent_id: str, child_id: str):
        super().__init__(f"{parent_id} -> {child_id} would create a parent-of cycle")
        self.parent_id = parent_id
        self.child_id = child_id


class SelfRelationshipError(FamilyTreeError):
    def __init__(self, person_id: str):
        super().__init__(f"{person_id} cannot be related to themselves")
        self.person_id = person_id


class HasRelationshipsError(FamilyTreeError):
    def __init__(self, person_id: str):
        super().__init__(f"{person_id} still has relationships")
        self.person_id = person_id


class ConfigError(FamilyTreeError, ValueError):
    """Invalid layout or logging settings."""
