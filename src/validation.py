"""Data-quality checks over a family tree snapshot."""

import networkx as nx

from graph import GraphSnapshot

MIN_PARENT_AGE = 12


def validate_snapshot(snapshot: GraphSnapshot) -> list[str]:
    """
    Validate the family tree for:
    - Cycles in parent-child relationships
    - Impossible ages (child born before parent, parent younger than 12)
    - Death before birth

    Dates are ISO strings (YYYY-MM-DD) and compare as strings. The death date is read
    from ``metadata["death_date"]``.

    Returns a list of warning messages.
    """
    warnings: list[str] = []

    # The graph rejects cycles on insertion; this catches snapshots built by hand
    try:
        cycle = nx.find_cycle(snapshot.parent_graph(), orientation="original")
        cycle_nodes = [edge[0] for edge in cycle]
        warnings.append(f"Cycle detected in parent-child relationships: {cycle_nodes}")
    except nx.NetworkXNoCycle:
        pass

    for edge in snapshot.edges():
        if edge.role is None:
            continue
        parent = snapshot.persons[edge.person1_id]
        child = snapshot.persons[edge.person2_id]

        if not (parent.birth_date and child.birth_date):
            continue
        if child.birth_date < parent.birth_date:
            warnings.append(f"Impossible: {child.name} born before parent {parent.name}")
            continue
        try:
            parent_year = int(parent.birth_date[:4])
            child_year = int(child.birth_date[:4])
        except ValueError:
            continue
        if child_year - parent_year < MIN_PARENT_AGE:
            warnings.append(
                f"Suspicious: {parent.name} was less than {MIN_PARENT_AGE} years old "
                f"when {child.name} was born"
            )

    for person in snapshot.persons.values():
        death = person.metadata.get("death_date")
        if person.birth_date and death and death < person.birth_date:
            warnings.append(f"Impossible: {person.name} died before being born")

    return warnings
