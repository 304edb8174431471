"""
Core module - Polygon model, sessions, export and rasterization
"""

from core.models import (
    Point, Dimensions, AnnotationSettings, SessionState,
    ImageHandle, SessionSnapshot, ExportRecord,
)
from core.shapes import generate_default_polygon, compute_display_dimensions
from core.projection import EdgeProjection, find_insertion_point, project_onto_segment
from core.polygons import Polygon, polygon_area, normalize_polygon
from core.session import AnnotationSession, Workspace
from core.export_json import ExportBundle, export_bundle
from core.rasterize import RasterExport, compose_annotated_image, rasterize_snapshot

__all__ = [
    "Point", "Dimensions", "AnnotationSettings", "SessionState",
    "ImageHandle", "SessionSnapshot", "ExportRecord",
    "generate_default_polygon", "compute_display_dimensions",
    "EdgeProjection", "find_insertion_point", "project_onto_segment",
    "Polygon", "polygon_area", "normalize_polygon",
    "AnnotationSession", "Workspace",
    "ExportBundle", "export_bundle",
    "RasterExport", "compose_annotated_image", "rasterize_snapshot",
]
