"""
Visualization adapter: the boundary between the family tree and a rendering capability.

The adapter translates a projected layout into family-chart style records, hands a
copy of them to the renderer, and turns node clicks coming back from the renderer into
re-root requests.
"""

from collections.abc import Callable
import copy
from dataclasses import dataclass, field
from typing import Any, Protocol

from errors import UnknownPersonError
from family import FamilyTree
from graph import GraphSnapshot
from log import get_logger
from models import LayoutResult, ParentRole, Relationship
from projection import project

logger = get_logger(__name__)

ORIGINATOR_COLOR = "#8B4513"
DEFAULT_COLOR = "#6B7280"
LINEAGE_PALETTE = ("#2563EB", "#DC2626", "#059669", "#7C3AED", "#EA580C")

NODE_REF_PREFIX = "person:"

GENDERS = {"M": "male", "F": "female"}


def node_ref(person_id: str) -> str:
    return f"{NODE_REF_PREFIX}{person_id}"


def person_id_from_ref(ref: str) -> str:
    """Map a rendered node reference (``person:<id>`` or a bare id) back to a person id."""
    ref = ref.strip().lstrip("#")
    if ref.startswith(NODE_REF_PREFIX):
        return ref[len(NODE_REF_PREFIX):]
    return ref


@dataclass(frozen=True)
class LayoutRequest:
    """The input handed to a rendering capability's ``compute_layout``."""

    nodes: list[dict[str, Any]]
    edges: tuple[Relationship, ...]
    node_separation: float
    level_separation: float
    root_id: str
    layout: LayoutResult


class RenderingCapability(Protocol):
    def create_render_surface(self, container: Any) -> Any: ...

    def compute_layout(self, request: LayoutRequest) -> Any: ...

    def render(self, layout_result: Any, surface: Any, on_node_click: Callable[[str], None]) -> None: ...


@dataclass
class ChartView:
    """One published rendering of the tree."""

    root_id: str
    layout: LayoutResult
    chart_data: list[dict[str, Any]]
    surface: Any = None
    layout_result: Any = None


def lineage_colors(snapshot: GraphSnapshot, layout: LayoutResult) -> dict[str, str]:
    """
    Colour each visible person by lineage.

    The root gets the originator colour and each of the root's children opens a lineage
    with the next palette colour. Descendants inherit the lineage of their father, else
    their mother. Everyone else gets the default colour.
    """
    visible = set(layout.person_ids)
    colors = {person_id: DEFAULT_COLOR for person_id in layout.person_ids}
    colors[layout.root_id] = ORIGINATOR_COLOR

    lineage: dict[str, str] = {}
    for i, child in enumerate(c for c in snapshot.children_of(layout.root_id) if c in visible):
        lineage[child] = LINEAGE_PALETTE[i % len(LINEAGE_PALETTE)]

    # Layout nodes are ordered by generation, so parents are resolved before children
    for n in layout.nodes:
        if n.person_id in lineage or n.person_id == layout.root_id or n.generation < 2:
            continue
        for parent in snapshot.parents_of(n.person_id).values():
            if parent in lineage:
                lineage[n.person_id] = lineage[parent]
                break

    colors.update(lineage)
    return colors


def _is_twin(snapshot: GraphSnapshot, person_id: str) -> bool:
    person = snapshot.persons[person_id]
    parents = snapshot.parents_of(person_id)
    if not parents or not person.birth_order:
        return False
    first_parent = next(iter(parents.values()))
    return any(
        sibling != person_id
        and snapshot.persons[sibling].birth_order == person.birth_order
        and snapshot.parents_of(sibling) == parents
        for sibling in snapshot.children_of(first_parent)
    )


def to_chart_data(snapshot: GraphSnapshot, layout: LayoutResult) -> list[dict[str, Any]]:
    """
    Translate a layout into family-chart records ``{id, data, rels}``.

    Relations only point at persons present in the layout. Empty relation lists are
    omitted.
    """
    visible = set(layout.person_ids)
    colors = lineage_colors(snapshot, layout)
    records = []

    for n in layout.nodes:
        person = snapshot.persons[n.person_id]
        parents = snapshot.parents_of(n.person_id)
        spouses = [s for s in snapshot.spouses_of(n.person_id) if s in visible]
        children = [c for c in snapshot.children_of(n.person_id) if c in visible]

        rels: dict[str, Any] = {}
        for role in ParentRole:
            if parents.get(role) in visible:
                rels[role.value] = parents[role]
        if spouses:
            rels["spouses"] = spouses
        if children:
            rels["children"] = children

        records.append(
            {
                "id": person.id,
                "data": {
                    "name": person.name,
                    "birthday": person.birth_date or "",
                    "avatar": person.media or "",
                    "gender": GENDERS.get(person.sex or "", "unknown"),
                    "birth_order": person.birth_order,
                    "is_root": person.id == layout.root_id,
                    "is_twin": _is_twin(snapshot, person.id),
                    "is_polygamous": len(snapshot.spouses_of(person.id)) > 1,
                    "is_out_of_wedlock": not parents,
                    "lineage_color": colors[person.id],
                    "metadata": copy.deepcopy(person.metadata),
                },
                "rels": rels,
            }
        )
    return records


def fit_transform(layout: LayoutResult, width: float, height: float, fill: float = 0.8) -> tuple[float, float, float]:
    """
    Scale and translation that centre the layout in a ``width`` x ``height`` viewport.

    Returns:
        (scale, translate_x, translate_y); the scale never exceeds 1
    """
    if not layout.nodes or width <= 0 or height <= 0:
        return 1.0, width / 2, height / 2

    xs = [n.x for n in layout.nodes]
    ys = [n.y for n in layout.nodes]
    # Pad by one separation so single rows and columns still have an extent
    box_w = max(xs) - min(xs) + layout.node_separation
    box_h = max(ys) - min(ys) + layout.level_separation
    scale = min(width * fill / box_w, height * fill / box_h, 1.0)

    center_x = (min(xs) + max(xs)) / 2
    center_y = (min(ys) + max(ys)) / 2
    return scale, width / 2 - center_x * scale, height / 2 - center_y * scale


class VisualizationAdapter:
    """
    Publishes projections of a ``FamilyTree`` through a rendering capability.

    The adapter holds no graph state of its own: every publish takes a fresh snapshot,
    projects it, and hands the renderer a deep copy of the translated records.
    """

    def __init__(self, tree: FamilyTree, renderer: RenderingCapability, container: Any = None):
        self.tree = tree
        self.renderer = renderer
        self.container = container
        self.view: ChartView | None = None
        self._listeners: list[Callable[[ChartView], None]] = []

    def subscribe(self, listener: Callable[[ChartView], None]) -> None:
        """Call ``listener`` with every newly published view."""
        self._listeners.append(listener)

    def build_request(self, root_id: str) -> tuple[LayoutRequest, list[dict[str, Any]]]:
        snapshot = self.tree.snapshot()
        layout = project(snapshot, root_id, self.tree.settings)
        chart_data = to_chart_data(snapshot, layout)
        request = LayoutRequest(
            nodes=copy.deepcopy(chart_data),
            edges=layout.edges,
            node_separation=layout.node_separation,
            level_separation=layout.level_separation,
            root_id=root_id,
            layout=layout,
        )
        return request, chart_data

    def publish(self, root_id: str) -> ChartView:
        request, chart_data = self.build_request(root_id)

        surface = self.renderer.create_render_surface(self.container)
        layout_result = self.renderer.compute_layout(request)
        self.renderer.render(layout_result, surface, self.on_node_click)

        self.view = ChartView(
            root_id=root_id,
            layout=request.layout,
            chart_data=chart_data,
            surface=surface,
            layout_result=layout_result,
        )
        logger.info("tree_published", root_id=root_id, nodes=len(chart_data))
        for listener in self._listeners:
            listener(self.view)
        return self.view

    def on_node_click(self, ref: str) -> ChartView:
        """Re-root the tree on the clicked person and republish."""
        person_id = person_id_from_ref(ref)
        if self.view is not None and self.view.layout.node(person_id) is None:
            raise UnknownPersonError(person_id)
        logger.info("node_clicked", person_id=person_id)
        return self.publish(person_id)
