"""
Core data models for the annotator.

Dataclasses representing points, image handles, sessions snapshots and
export records.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import json


@dataclass(frozen=True)
class Point:
    """A vertex in display coordinates (origin top-left, y down)."""
    x: float
    y: float

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Dimensions:
    """Display size of a loaded image."""
    width: float
    height: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def to_dict(self) -> dict:
        return {"width": self.width, "height": self.height}


@dataclass
class AnnotationSettings:
    """Tunable constants of the annotation engine."""
    max_display_width: float = 600.0
    default_vertex_count: int = 16
    radius_ratio: float = 0.35
    insert_threshold: float = 15.0
    max_sessions: int = 2


class SessionState(str, Enum):
    LOADING = "loading"
    ANNOTATED = "annotated"
    EDITING = "editing"
    REMOVED = "removed"


@dataclass
class ImageHandle:
    """Represents an uploaded source image."""
    id: str
    name: str
    content_type: str = "image/png"
    data: Optional[bytes] = field(default=None, repr=False)

    def release(self):
        """Drop the raw bytes."""
        self.data = None


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a session, consumed by export."""
    session_id: str
    image_name: str
    content_type: str
    image_bytes: Optional[bytes]
    points: tuple[Point, ...]
    dimensions: Dimensions
    state: SessionState

    def to_dict(self) -> dict:
        """Snapshot fields exchanged with the session host (no image bytes)."""
        return {
            "imageName": self.image_name,
            "points": [p.to_dict() for p in self.points],
            "dimensions": self.dimensions.to_dict(),
        }


@dataclass(frozen=True)
class ExportRecord:
    """One entry of a structured export bundle."""
    image_name: str
    image_data: str  # data URL
    points: tuple[Point, ...]
    dimensions: Dimensions
    timestamp: str  # ISO-8601

    def to_dict(self) -> dict:
        return {
            "imageName": self.image_name,
            "imageData": self.image_data,
            "annotations": {
                "points": [p.to_dict() for p in self.points],
                "dimensions": self.dimensions.to_dict(),
            },
            "timestamp": self.timestamp,
        }


def records_to_json(records: list[ExportRecord]) -> str:
    """
    Serialize export records to the bundle JSON document.

    Raises:
        ValueError: If a coordinate is NaN or infinite
    """
    return json.dumps([r.to_dict() for r in records], indent=2, allow_nan=False)
