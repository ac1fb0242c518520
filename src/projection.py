"""
Tree projection: turn a graph snapshot and a chosen root into a positioned layout.

The projection is a pure function of its inputs. It runs in four steps:

1. Generations are assigned breadth-first from the root. Children sit one generation
   below, parents one above, and spouses share the generation of the person they were
   reached from, so people who married in never skew the layering. The first generation
   a person is discovered at wins.
2. Each generation is ordered by the discovery rank of the person it was reached
   through, then by registry creation order.
3. Spouses in the same generation are grouped into blocks (spouse gap inside a block,
   node separation between blocks). Generations are positioned deepest first, centring
   each block over the span of its children and sweeping left to right so no two
   blocks overlap.
4. Nodes are shifted so the root sits at x = 0, and edges are restricted to the
   persons that were reached.
"""

from collections import deque

from errors import UnknownRootError
from graph import GraphSnapshot
from log import get_logger
from models import LayoutNode, LayoutResult
from settings import LayoutSettings

logger = get_logger(__name__)


def assign_generations(snapshot: GraphSnapshot, root_id: str) -> tuple[dict[str, int], dict[str, int]]:
    """
    Breadth-first generation assignment.

    Returns:
        (generation, via) where ``via`` maps each person to the discovery rank of the
        person it was reached from (-1 for the root)
    """
    generation = {root_id: 0}
    via = {root_id: -1}
    rank = {root_id: 0}
    queue = deque([root_id])

    while queue:
        current = queue.popleft()
        g = generation[current]
        neighbours = [(s, g) for s in snapshot.spouses_of(current)]
        neighbours += [(c, g + 1) for c in snapshot.children_of(current)]
        neighbours += [(p, g - 1) for p in snapshot.parents_of(current).values()]

        for person_id, person_generation in neighbours:
            if person_id in generation:
                continue
            generation[person_id] = person_generation
            via[person_id] = rank[current]
            rank[person_id] = len(rank)
            queue.append(person_id)

    return generation, via


def order_generations(
    snapshot: GraphSnapshot, generation: dict[str, int], via: dict[str, int]
) -> dict[int, list[str]]:
    """Group persons by generation, ordered by discovering person then creation order."""
    rows: dict[int, list[str]] = {}
    for person_id in sorted(generation, key=lambda p: (via[p], snapshot.order[p])):
        rows.setdefault(generation[person_id], []).append(person_id)
    return dict(sorted(rows.items()))


def _spouse_blocks(snapshot: GraphSnapshot, row: list[str], generation: dict[str, int]) -> list[list[str]]:
    blocks = []
    placed: set[str] = set()
    for person_id in row:
        if person_id in placed:
            continue
        block = [person_id]
        for spouse in snapshot.spouses_of(person_id):
            if spouse not in placed and spouse not in block and generation.get(spouse) == generation[person_id]:
                block.append(spouse)
        placed.update(block)
        blocks.append(block)
    return blocks


def _desired_lefts(
    snapshot: GraphSnapshot,
    blocks: list[list[str]],
    widths: list[float],
    g: int,
    generation: dict[str, int],
    xs: dict[str, float],
    settings: LayoutSettings,
) -> list[float]:
    desired: list[float | None] = []
    for block, width in zip(blocks, widths):
        kids = [
            xs[child]
            for member in block
            for child in snapshot.children_of(member)
            if generation.get(child) == g + 1 and child in xs
        ]
        if kids:
            desired.append((min(kids) + max(kids)) / 2 - width / 2)
        else:
            desired.append(None)

    anchored = [i for i, d in enumerate(desired) if d is not None]
    if not anchored:
        desired[0] = 0.0
        anchored = [0]

    # Childless blocks ahead of the first anchored block are laid out leftwards from it
    first = anchored[0]
    for i in range(first - 1, -1, -1):
        desired[i] = desired[i + 1] - settings.node_separation - widths[i]
    for i in range(first + 1, len(desired)):
        if desired[i] is None:
            desired[i] = desired[i - 1] + widths[i - 1] + settings.node_separation
    return desired


def assign_positions(
    snapshot: GraphSnapshot,
    rows: dict[int, list[str]],
    generation: dict[str, int],
    settings: LayoutSettings,
) -> dict[str, float]:
    """Horizontal position of every person, children placed before their parents."""
    xs: dict[str, float] = {}
    for g in sorted(rows, reverse=True):
        blocks = _spouse_blocks(snapshot, rows[g], generation)
        widths = [(len(block) - 1) * settings.spouse_separation for block in blocks]
        desired = _desired_lefts(snapshot, blocks, widths, g, generation, xs, settings)

        right_edge = None
        for block, width, left in zip(blocks, widths, desired):
            if right_edge is not None:
                left = max(left, right_edge + settings.node_separation)
            for i, member in enumerate(block):
                xs[member] = left + i * settings.spouse_separation
            right_edge = left + width
    return xs


def project(snapshot: GraphSnapshot, root_id: str, settings: LayoutSettings | None = None) -> LayoutResult:
    """
    Project the component of ``root_id`` into a positioned layout.

    Persons not connected to the root are left out. Raises ``UnknownRootError`` when
    the root is not in the snapshot.
    """
    if root_id not in snapshot:
        raise UnknownRootError(root_id)
    settings = settings or LayoutSettings()

    generation, via = assign_generations(snapshot, root_id)
    rows = order_generations(snapshot, generation, via)
    xs = assign_positions(snapshot, rows, generation, settings)

    offset = xs[root_id]
    nodes = sorted(
        (
            LayoutNode(
                person_id=person_id,
                generation=generation[person_id],
                x=round(x - offset, 3),
                y=round(generation[person_id] * settings.level_separation, 3),
            )
            for person_id, x in xs.items()
        ),
        key=lambda n: (n.generation, n.x, snapshot.order[n.person_id]),
    )
    edges = tuple(
        edge
        for edge in snapshot.edges()
        if edge.person1_id in generation and edge.person2_id in generation
    )

    logger.debug(
        "tree_projected",
        root_id=root_id,
        nodes=len(nodes),
        edges=len(edges),
        omitted=len(snapshot) - len(nodes),
    )
    return LayoutResult(
        root_id=root_id,
        nodes=tuple(nodes),
        edges=edges,
        node_separation=settings.node_separation,
        level_separation=settings.level_separation,
    )
