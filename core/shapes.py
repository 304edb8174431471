"""
Default shape generation and display sizing.
"""

import math

from core.models import Point, Dimensions


DEFAULT_VERTEX_COUNT = 16
DEFAULT_RADIUS_RATIO = 0.35
MAX_DISPLAY_WIDTH = 600.0


def generate_default_polygon(
    width: float,
    height: float,
    vertex_count: int = DEFAULT_VERTEX_COUNT,
    radius_ratio: float = DEFAULT_RADIUS_RATIO,
) -> list[Point]:
    """
    Generate a regular polygon approximating a circle centred in the image.

    Args:
        width: Display width
        height: Display height
        vertex_count: Number of vertices
        radius_ratio: Radius as a fraction of min(width, height)

    Returns:
        List of points, vertex 0 at angle 0 and proceeding clockwise on screen
    """
    if vertex_count < 1:
        raise ValueError(f"vertex_count must be at least 1, got {vertex_count}")

    center_x = width / 2
    center_y = height / 2
    radius = min(width, height) * radius_ratio

    points = []
    for i in range(vertex_count):
        angle = (i / vertex_count) * 2 * math.pi
        points.append(Point(
            x=center_x + radius * math.cos(angle),
            y=center_y + radius * math.sin(angle),
        ))
    return points


def compute_display_dimensions(
    natural_width: float,
    natural_height: float,
    max_display_width: float = MAX_DISPLAY_WIDTH,
) -> Dimensions:
    """
    Fit an image's natural size to the display width cap.

    Height follows the natural aspect ratio.
    """
    if natural_width <= 0 or natural_height <= 0:
        raise ValueError(f"Invalid natural size: {natural_width}x{natural_height}")

    ratio = natural_width / natural_height
    width = min(max_display_width, natural_width)
    return Dimensions(width=float(width), height=width / ratio)
