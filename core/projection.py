"""
Edge projection: locate where a click on the outline should add a vertex.
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from core.models import Point


INSERT_THRESHOLD = 15.0


@dataclass(frozen=True)
class EdgeProjection:
    """Closest edge to a query point and the projected point on it."""
    edge_index: int
    point: Point
    distance: float


def project_onto_segment(p: Point, a: Point, b: Point) -> tuple[float, Point]:
    """
    Project p onto the segment a-b.

    Args:
        p: Query point
        a: Segment start
        b: Segment end

    Returns:
        (t, projected) with t clamped to [0, 1]; t is 0 for a zero-length segment
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy

    if length_sq == 0:
        t = 0.0
    else:
        t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
        t = max(0.0, min(1.0, t))

    return t, Point(x=a.x + t * dx, y=a.y + t * dy)


def closest_edge(points: Sequence[Point], click: Point) -> Optional[EdgeProjection]:
    """
    Find the cyclic edge nearest to click, without any distance cutoff.

    Ties keep the lowest edge index. Returns None with fewer than 2 points.
    """
    n = len(points)
    if n < 2:
        return None

    best: Optional[EdgeProjection] = None
    for i in range(n):
        _, projected = project_onto_segment(click, points[i], points[(i + 1) % n])
        distance = math.hypot(click.x - projected.x, click.y - projected.y)
        if best is None or distance < best.distance:
            best = EdgeProjection(edge_index=i, point=projected, distance=distance)

    return best


def find_insertion_point(
    points: Sequence[Point],
    click: Point,
    threshold: float = INSERT_THRESHOLD,
) -> Optional[EdgeProjection]:
    """
    Resolve an edge click to an insertion position.

    Args:
        points: Polygon vertices (cyclic)
        click: Pointer position in display coordinates
        threshold: Maximum accepted distance from the outline (exclusive)

    Returns:
        EdgeProjection to insert after, or None if the click is not close
        enough to any edge
    """
    result = closest_edge(points, click)
    if result is None or not result.distance < threshold:
        return None
    return result
