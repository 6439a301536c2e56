"""
Mind-Map Layout Engine.

Places the note title at the center and up to 12 study points on a circle
around it. Point i of n sits at angle ``i * 2pi/n - pi/2`` so the first
point is directly above the center; the radius grows with the number of
points, ``max(200, 25 * n)``.

MindMapView keeps the interactive state on top of a layout: user-dragged
positions (kept until the points themselves change) and a single selected
node.
"""
from __future__ import annotations

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field, replace

from studybuddy.core.errors import NotFoundError

MAX_POINTS = 12
LABEL_LIMIT = 120
MIN_RADIUS = 200.0
RADIUS_PER_POINT = 25.0

CENTER_ID = "center"
CENTER_X = 400.0
CENTER_Y = 300.0
CENTER_HALF_WIDTH = 70.0
NODE_HALF_WIDTH = 140.0

DEFAULT_TITLE = "Summary Overview"
EMPTY_MESSAGE = "No key points found to generate a mind map."


@dataclass
class MindMapNode:
    """A node; (x, y) is its top-left position, (anchor_x, anchor_y) the layout point."""

    id: str
    label: str
    full_text: str
    is_center: bool
    x: float
    y: float
    anchor_x: float
    anchor_y: float
    angle: float | None = None
    selected: bool = False

    @property
    def angle_degrees(self) -> float | None:
        return None if self.angle is None else math.degrees(self.angle)


@dataclass(frozen=True)
class MindMapEdge:
    """Directed edge from the center node to a satellite."""

    id: str
    source: str
    target: str


@dataclass
class MindMap:
    nodes: list[MindMapNode] = field(default_factory=list)
    edges: list[MindMapEdge] = field(default_factory=list)
    radius: float = 0.0

    def __iter__(self) -> Iterator:
        # Allows ``nodes, edges = layout(...)``
        return iter((self.nodes, self.edges))

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    @property
    def center(self) -> MindMapNode | None:
        return next((n for n in self.nodes if n.is_center), None)

    @property
    def satellites(self) -> list[MindMapNode]:
        return [n for n in self.nodes if not n.is_center]


def radius_for(count: int) -> float:
    return max(MIN_RADIUS, count * RADIUS_PER_POINT)


def truncate_label(text: str, limit: int = LABEL_LIMIT) -> str:
    return text[:limit] + "..." if len(text) > limit else text


def layout(points: Sequence[str], title: str | None = None) -> MindMap:
    """
    Lay out study points radially around a center node.

    Args:
        points: Study points; only the first 12 are placed
        title: Center label (note title); defaults to "Summary Overview"

    Returns:
        MindMap with 1 + n nodes and n edges, or an empty map for no points
    """
    placed = list(points[:MAX_POINTS])
    if not placed:
        return MindMap()

    label = title or DEFAULT_TITLE
    center = MindMapNode(
        id=CENTER_ID,
        label=label,
        full_text=label,
        is_center=True,
        x=CENTER_X - CENTER_HALF_WIDTH,
        y=CENTER_Y,
        anchor_x=CENTER_X,
        anchor_y=CENTER_Y,
    )

    n = len(placed)
    radius = radius_for(n)
    step = 2 * math.pi / n
    nodes = [center]
    edges = []
    for i, point in enumerate(placed):
        angle = i * step - math.pi / 2
        ax = CENTER_X + radius * math.cos(angle)
        ay = CENTER_Y + radius * math.sin(angle)
        node_id = f"point-{i}"
        nodes.append(
            MindMapNode(
                id=node_id,
                label=truncate_label(point),
                full_text=point,
                is_center=False,
                x=ax - NODE_HALF_WIDTH,
                y=ay,
                anchor_x=ax,
                anchor_y=ay,
                angle=angle,
            )
        )
        edges.append(MindMapEdge(id=f"edge-{i}", source=CENTER_ID, target=node_id))

    return MindMap(nodes=nodes, edges=edges, radius=radius)


class MindMapView:
    """Interactive state over a layout: drag positions and single selection."""

    def __init__(self, points: Sequence[str] = (), title: str | None = None):
        self._points: tuple[str, ...] = ()
        self._title: str | None = None
        self._map = MindMap()
        self._positions: dict[str, tuple[float, float]] = {}
        self.selected_id: str | None = None
        self.refresh(points, title)

    def refresh(self, points: Sequence[str], title: str | None = None) -> bool:
        """
        Recompute the layout if the points changed.

        A title-only change relabels the center node and keeps user positions.

        Returns:
            True if the layout was recomputed
        """
        placed = tuple(points[:MAX_POINTS])
        if placed == self._points and self._map.nodes:
            if title != self._title:
                self._title = title
                center = self._map.center
                if center is not None:
                    center.label = center.full_text = title or DEFAULT_TITLE
            return False

        self._points = placed
        self._title = title
        self._map = layout(placed, title)
        self._positions.clear()
        self.selected_id = None
        return True

    @property
    def is_empty(self) -> bool:
        return self._map.is_empty

    @property
    def empty_message(self) -> str | None:
        return EMPTY_MESSAGE if self.is_empty else None

    @property
    def radius(self) -> float:
        return self._map.radius

    @property
    def nodes(self) -> list[MindMapNode]:
        out = []
        for node in self._map.nodes:
            x, y = self._positions.get(node.id, (node.x, node.y))
            out.append(replace(node, x=x, y=y, selected=node.id == self.selected_id))
        return out

    @property
    def edges(self) -> list[MindMapEdge]:
        return list(self._map.edges)

    def _require(self, node_id: str) -> MindMapNode:
        for node in self._map.nodes:
            if node.id == node_id:
                return node
        raise NotFoundError(f"Mind map node not found: {node_id}")

    def move_node(self, node_id: str, x: float, y: float) -> None:
        self._require(node_id)
        self._positions[node_id] = (x, y)

    def select(self, node_id: str) -> str | None:
        """Toggle selection on a node; selecting another node moves the highlight."""
        self._require(node_id)
        self.selected_id = None if self.selected_id == node_id else node_id
        return self.selected_id

    def clear_selection(self) -> None:
        """Click on the empty canvas."""
        self.selected_id = None

    def full_text(self, node_id: str) -> str:
        return self._require(node_id).full_text
