"""
Structured JSON export.

Bundles every live session into one ordered JSON document:

    [
      {
        "imageName": "...",
        "imageData": "data:image/png;base64,...",
        "annotations": {
          "points": [{"x": ..., "y": ...}, ...],
          "dimensions": {"width": ..., "height": ...}
        },
        "timestamp": "2024-01-01T00:00:00+00:00"
      },
      ...
    ]
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from core.errors import ResourceUnavailable, UserInputRejected
from core.images import encode_data_url
from core.models import ExportRecord, SessionSnapshot, SessionState, records_to_json

logger = logging.getLogger(__name__)

Encoder = Callable[[Optional[bytes], str], str]


@dataclass
class ExportBundle:
    """Result of a structured export."""
    filename: str
    content: bytes
    records: list[ExportRecord]
    warnings: list[str] = field(default_factory=list)

    media_type = "application/json"

    @property
    def total_points(self) -> int:
        return sum(len(r.points) for r in self.records)


def bundle_filename(now: datetime) -> str:
    """annotations-<epoch milliseconds>.json"""
    return f"annotations-{int(now.timestamp() * 1000)}.json"


def build_export_record(
    snapshot: SessionSnapshot,
    encoder: Encoder = encode_data_url,
    now: Optional[datetime] = None,
) -> ExportRecord:
    """
    Build the export record of a single session.

    Raises:
        ResourceUnavailable: If the image bytes cannot be encoded
    """
    now = now or datetime.now(timezone.utc)
    try:
        image_data = encoder(snapshot.image_bytes, snapshot.content_type)
    except ResourceUnavailable:
        raise
    except Exception as e:
        raise ResourceUnavailable(f"Failed to encode {snapshot.image_name}: {e}") from e

    return ExportRecord(
        image_name=snapshot.image_name,
        image_data=image_data,
        points=snapshot.points,
        dimensions=snapshot.dimensions,
        timestamp=now.isoformat(),
    )


def build_export_records(
    snapshots: Sequence[SessionSnapshot],
    encoder: Encoder = encode_data_url,
    now: Optional[datetime] = None,
) -> list[ExportRecord]:
    """
    Build records for all snapshots, in order. Fails as a whole.

    Without `now`, each record is stamped when it is built.
    """
    return [build_export_record(s, encoder, now) for s in snapshots]


def export_bundle(
    snapshots: Sequence[SessionSnapshot],
    encoder: Encoder = encode_data_url,
    now: Optional[datetime] = None,
) -> ExportBundle:
    """
    Export all sessions to a single JSON document.

    Args:
        snapshots: Session snapshots in workspace order
        encoder: Turns (bytes, content_type) into a portable string
        now: Export time for the filename and every record. By default the
            filename uses the current UTC time and each record its own.

    Returns:
        ExportBundle with filename and serialized content

    Raises:
        UserInputRejected: If there is nothing to export
        ResourceUnavailable: If any image fails to encode or a coordinate is
            not finite; nothing is produced
    """
    if not snapshots:
        raise UserInputRejected("No images to export!")

    exported_at = now or datetime.now(timezone.utc)
    warnings = []

    for snapshot in snapshots:
        if snapshot.state == SessionState.LOADING:
            warnings.append(f"{snapshot.image_name}: image is still loading")
        elif not snapshot.points:
            warnings.append(f"{snapshot.image_name}: annotation has no points")

    try:
        records = build_export_records(snapshots, encoder, now)
    except ResourceUnavailable as e:
        logger.error(f"Export failed: {e}")
        raise

    try:
        content = records_to_json(records).encode('utf-8')
    except ValueError as e:
        logger.error(f"Export failed: {e}")
        raise ResourceUnavailable(f"Annotation has invalid coordinates: {e}") from e

    logger.info(f"Exported {len(records)} annotation(s), {len(content)} bytes")

    return ExportBundle(
        filename=bundle_filename(exported_at),
        content=content,
        records=records,
        warnings=warnings,
    )
