"""
Rasterized export: composite an image and its outline into a PNG.
"""

import io
import os
import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
import cv2
from PIL import Image

from core.errors import ImageDecodeError, ResourceUnavailable, UserInputRejected
from core.images import open_image
from core.models import Dimensions, Point, SessionSnapshot

logger = logging.getLogger(__name__)

# Fixed-point bits for sub-pixel drawing with OpenCV
SHIFT = 4
SCALE = 1 << SHIFT

# Coordinates beyond this are clipped so the fixed-point values fit int32
COORD_LIMIT = 1e6


@dataclass(frozen=True)
class OverlayStyle:
    """Colors are RGB tuples."""
    fill_color: tuple[int, int, int] = (24, 144, 255)
    fill_alpha: float = 0.2
    stroke_color: tuple[int, int, int] = (24, 144, 255)
    stroke_width: int = 3
    marker_radius: float = 5.0
    marker_color: tuple[int, int, int] = (24, 144, 255)
    marker_outline_color: tuple[int, int, int] = (255, 255, 255)
    marker_outline_width: int = 2


DEFAULT_STYLE = OverlayStyle()


@dataclass
class RasterExport:
    """A rendered image ready for download."""
    filename: str
    content: bytes

    media_type = "image/png"


def annotated_filename(image_name: str) -> str:
    """photo.jpg -> photo_annotated.png"""
    base, _ext = os.path.splitext(image_name)
    return f"{base}_annotated.png"


def _to_fixed(points: Sequence[Point]) -> np.ndarray:
    """Points as an Nx1x2 int32 array in SHIFT fixed-point."""
    coords = np.array([[p.x, p.y] for p in points], dtype=np.float64)
    coords = np.nan_to_num(coords, nan=0.0, posinf=COORD_LIMIT, neginf=-COORD_LIMIT)
    coords = np.clip(coords, -COORD_LIMIT, COORD_LIMIT)
    return np.round(coords * SCALE).astype(np.int32).reshape(-1, 1, 2)


def draw_overlay(
    canvas: np.ndarray,
    points: Sequence[Point],
    style: OverlayStyle = DEFAULT_STYLE,
) -> np.ndarray:
    """
    Draw the closed outline and vertex markers onto an RGB array.

    Args:
        canvas: HxWx3 uint8 array (not modified)
        points: Polygon vertices in canvas coordinates
        style: Overlay colors and sizes

    Returns:
        New HxWx3 uint8 array
    """
    contour = _to_fixed(points)

    # Semi-transparent fill
    filled = canvas.copy()
    cv2.fillPoly(filled, [contour], style.fill_color, lineType=cv2.LINE_AA, shift=SHIFT)
    out = cv2.addWeighted(filled, style.fill_alpha, canvas, 1.0 - style.fill_alpha, 0)

    cv2.polylines(
        out, [contour], isClosed=True, color=style.stroke_color,
        thickness=style.stroke_width, lineType=cv2.LINE_AA, shift=SHIFT,
    )

    radius = int(round(style.marker_radius * SCALE))
    for x, y in contour.reshape(-1, 2):
        center = (int(x), int(y))
        cv2.circle(out, center, radius, style.marker_color, -1, cv2.LINE_AA, SHIFT)
        cv2.circle(
            out, center, radius, style.marker_outline_color,
            style.marker_outline_width, cv2.LINE_AA, SHIFT,
        )

    return out


def compose_annotated_image(
    image_bytes: bytes,
    dimensions: Dimensions,
    points: Sequence[Point],
    style: OverlayStyle = DEFAULT_STYLE,
) -> bytes:
    """
    Render the image scaled to the display size with its outline on top.

    Raises:
        UserInputRejected: If there are no points
        ResourceUnavailable: If the image cannot be decoded or encoded
    """
    if not points:
        raise UserInputRejected("No image or annotation to download!")
    if dimensions.is_empty:
        raise ResourceUnavailable("Image has no display size")

    width = max(1, int(round(dimensions.width)))
    height = max(1, int(round(dimensions.height)))

    try:
        img = open_image(image_bytes).convert('RGB')
    except ImageDecodeError as e:
        raise ResourceUnavailable(str(e)) from e

    img = img.resize((width, height), Image.Resampling.BILINEAR)
    canvas = np.array(img, dtype=np.uint8)

    try:
        rendered = draw_overlay(canvas, points, style)
        buffer = io.BytesIO()
        Image.fromarray(rendered).save(buffer, format='PNG')
    except (cv2.error, OSError, ValueError) as e:
        logger.error(f"Failed to render annotation: {e}")
        raise ResourceUnavailable(f"Failed to create image: {e}") from e

    return buffer.getvalue()


def rasterize_snapshot(
    snapshot: SessionSnapshot,
    style: OverlayStyle = DEFAULT_STYLE,
) -> RasterExport:
    """Render a session snapshot to a downloadable PNG."""
    if not snapshot.points or snapshot.image_bytes is None:
        raise UserInputRejected("No image or annotation to download!")

    content = compose_annotated_image(
        snapshot.image_bytes, snapshot.dimensions, snapshot.points, style
    )
    logger.info(f"Rendered {snapshot.image_name} with {len(snapshot.points)} points")
    return RasterExport(filename=annotated_filename(snapshot.image_name), content=content)
