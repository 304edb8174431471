"""
Polygon model and polygon utilities.

A polygon is an ordered list of points read cyclically: edge i joins
point i to point (i + 1) % n.
"""

from typing import Iterable, Iterator, Optional

from core.models import Point
from core.projection import EdgeProjection, find_insertion_point, INSERT_THRESHOLD
from core.shapes import generate_default_polygon, DEFAULT_VERTEX_COUNT, DEFAULT_RADIUS_RATIO


class Polygon:
    """
    Editable closed outline.

    Vertices can be moved and inserted but never removed.
    """

    def __init__(self, points: Optional[Iterable[Point]] = None):
        self._points: list[Point] = list(points) if points else []

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[Point]:
        return iter(self._points)

    def __getitem__(self, index: int) -> Point:
        return self._points[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Polygon):
            return NotImplemented
        return self._points == other._points

    def __repr__(self) -> str:
        return f"Polygon({len(self._points)} points)"

    @property
    def is_empty(self) -> bool:
        return not self._points

    # ==================== Mutation ====================

    def replace(self, index: int, point: Point) -> bool:
        """
        Overwrite the vertex at `index` (dragging).

        Out-of-range indices are ignored. No clamping against the canvas.

        Returns:
            True if a vertex was replaced
        """
        if not 0 <= index < len(self._points):
            return False
        self._points[index] = point
        return True

    def insert_after(self, edge_index: int, point: Point):
        """Insert `point` between vertex `edge_index` and its successor."""
        if not 0 <= edge_index < max(len(self._points), 1):
            raise IndexError(f"Edge index {edge_index} out of range")
        self._points.insert(edge_index + 1, point)

    def insert_at_click(
        self,
        click: Point,
        threshold: float = INSERT_THRESHOLD,
    ) -> Optional[EdgeProjection]:
        """Insert a vertex on the edge nearest to `click`, if close enough."""
        result = find_insertion_point(self._points, click, threshold)
        if result is not None:
            self.insert_after(result.edge_index, result.point)
        return result

    def reset(
        self,
        width: float,
        height: float,
        vertex_count: int = DEFAULT_VERTEX_COUNT,
        radius_ratio: float = DEFAULT_RADIUS_RATIO,
    ):
        """Replace all vertices with the default shape for the given size."""
        self._points = generate_default_polygon(width, height, vertex_count, radius_ratio)

    # ==================== Conversion ====================

    def to_list(self) -> list[tuple[float, float]]:
        return [(p.x, p.y) for p in self._points]

    def to_dicts(self) -> list[dict]:
        return [p.to_dict() for p in self._points]

    def area(self) -> float:
        return polygon_area(self.to_list())


def normalize_polygon(
    polygon: list[tuple[float, float]],
    width: float,
    height: float
) -> list[tuple[float, float]]:
    """
    Normalize polygon coordinates to [0, 1] range.

    Args:
        polygon: List of (x, y) display coordinates
        width: Display width
        height: Display height

    Returns:
        List of (x, y) normalized coordinates
    """
    return [(x / width, y / height) for x, y in polygon]


def polygon_area(polygon: list[tuple[float, float]]) -> float:
    """
    Calculate the area of a polygon using the shoelace formula.

    Args:
        polygon: List of (x, y) coordinates

    Returns:
        Area (in whatever units the coordinates are in)
    """
    n = len(polygon)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]

    return abs(area) / 2.0


def points_outside(
    polygon: list[tuple[float, float]],
    width: float,
    height: float
) -> list[int]:
    """Indices of vertices lying outside the [0, width] x [0, height] area."""
    return [
        i for i, (x, y) in enumerate(polygon)
        if not (0 <= x <= width and 0 <= y <= height)
    ]
