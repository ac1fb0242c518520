"""Pydot/Graphviz rendering capability for projected family trees."""

from collections.abc import Callable
from pathlib import Path
import tempfile

import networkx as nx
import pydot

from adapter import LayoutRequest, node_ref, person_id_from_ref
from graph import build_union_layout_graph
from log import get_logger

logger = get_logger(__name__)

# Layout units per Graphviz point
POINTS_PER_UNIT = 0.3


def chart_graph(request: LayoutRequest) -> nx.MultiDiGraph:
    """
    Build a NetworkX graph of the requested chart.

    Person nodes carry their chart data and pinned ``x``/``y``; edges are keyed by
    ``relationship_type`` (and carry ``role`` for PARENT_OF), so a parent who is
    also recorded as the child's spouse keeps both edges.
    """
    G = nx.MultiDiGraph()
    positions = {n.person_id: n for n in request.layout.nodes}

    for record in request.nodes:
        pos = positions[record["id"]]
        G.add_node(record["id"], x=pos.x, y=pos.y, generation=pos.generation, **record["data"])

    for edge in request.edges:
        attrs = {"relationship_type": edge.relationship_type.value}
        if edge.role is not None:
            attrs["role"] = edge.role.value
        G.add_edge(edge.person1_id, edge.person2_id, key=edge.relationship_type.value, **attrs)

    return G


def _pos(x: float, y: float) -> str:
    # Graphviz y grows upwards, generations grow downwards
    return f"{x * POINTS_PER_UNIT:.2f},{-y * POINTS_PER_UNIT:.2f}!"


class PydotRenderer:
    """
    Renders a family chart with Graphviz at the positions computed by the projection.

    - Person cards are boxes, or ellipses for women, filled with the lineage colour
    - Spouse pairs connect through a small family point, children hang below it
    - Every person node carries ``URL``/``id`` ``person:<id>`` so SVG clicks can be
      routed back through ``click``
    """

    def __init__(self):
        self.container: Path | None = None
        self._on_node_click: Callable[[str], object] | None = None

    def create_render_surface(self, container: Path | str | None = None) -> pydot.Dot:
        P = pydot.Dot(graph_type="digraph")
        P.set("layout", "neato")  # honour pinned positions
        P.set("splines", "ortho")
        P.set("outputorder", "edgesfirst")
        self.container = Path(container) if container is not None else None
        return P

    def compute_layout(self, request: LayoutRequest) -> LayoutRequest:
        # Positions already come from the projection
        return request

    def render(self, layout_result: LayoutRequest, surface: pydot.Dot, on_node_click: Callable[[str], object]) -> None:
        self._on_node_click = on_node_click
        H = build_union_layout_graph(chart_graph(layout_result))

        for node, data in H.nodes(data=True):
            if data.get("node_type") == "family":
                spouses = [H.nodes[s] for s in data.get("spouses", ())]
                x = sum(s["x"] for s in spouses) / len(spouses)
                y = spouses[0]["y"] + layout_result.level_separation / 2
                surface.add_node(
                    pydot.Node(
                        str(node),
                        shape="point",
                        width="0.1",
                        height="0.1",
                        label="",
                        pos=_pos(x, y),
                    )
                )
                continue

            label = data.get("name", node)
            if data.get("birthday"):
                label = f"{label}\n{data['birthday'][:4]}"
            ref = node_ref(node)
            surface.add_node(
                pydot.Node(
                    str(node),
                    label=label,
                    shape="ellipse" if data.get("gender") == "female" else "box",
                    style="rounded,filled",
                    fillcolor=data.get("lineage_color", "lightgray"),
                    fontcolor="white",
                    fontsize="10",
                    penwidth="3" if data.get("is_root") else "1",
                    pos=_pos(data["x"], data["y"]),
                    URL=ref,
                    id=ref,
                    tooltip=data.get("name", node),
                )
            )

        for u, v, data in H.edges(data=True):
            if data.get("edge_type") == "spouse_to_family":
                surface.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
            elif data.get("edge_type") == "family_to_child":
                surface.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

        logger.debug("chart_rendered", root_id=layout_result.root_id, graph_nodes=H.number_of_nodes())

    def click(self, ref: str):
        """Deliver a click on a rendered node to the registered callback."""
        if self._on_node_click is None:
            raise RuntimeError("Nothing has been rendered yet")
        return self._on_node_click(node_ref(person_id_from_ref(ref)))

    def write(self, surface: pydot.Dot, output_path: Path | None = None) -> Path | None:
        """
        Write the surface to ``output_path`` (PNG, SVG or PDF by extension), or show it
        with matplotlib when there is neither a path nor a render container.
        """
        output_path = output_path or self.container
        if output_path:
            ext = output_path.suffix.lower().lstrip(".")
            if ext not in ("png", "svg", "pdf"):
                ext = "png"
            surface.write(str(output_path), format=ext)
            logger.info("chart_written", path=str(output_path), format=ext)
            return output_path

        import matplotlib.image as mpimg
        import matplotlib.pyplot as plt

        with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
            surface.write(f.name, format="png")
            img = mpimg.imread(f.name)
            plt.figure(figsize=(20, 16))
            plt.imshow(img)
            plt.axis("off")
            plt.tight_layout()
            plt.show()
        return None
