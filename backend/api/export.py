"""
Export API endpoints
"""

import logging
from urllib.parse import quote

from fastapi import APIRouter
from fastapi.responses import Response
from pydantic import BaseModel

from core.export_json import export_bundle
from core.rasterize import rasterize_snapshot
from core.validate import validate_workspace
from backend.api.sessions import get_workspace

logger = logging.getLogger(__name__)

router = APIRouter()


def attachment(content: bytes, media_type: str, filename: str) -> Response:
    """Response delivered as a file download."""
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename*=utf-8''{quote(filename)}"},
    )


@router.get("/json")
async def export_json():
    """Export all annotations with their images as one JSON file."""
    workspace = get_workspace()

    bundle = export_bundle(workspace.snapshots())

    for warning in bundle.warnings:
        logger.warning(f"Export: {warning}")

    return attachment(bundle.content, bundle.media_type, bundle.filename)


@router.get("/{session_id}/image")
async def export_image(session_id: str):
    """Download an image with its annotation drawn on it."""
    snapshot = get_workspace().get_snapshot(session_id)

    raster = rasterize_snapshot(snapshot)

    return attachment(raster.content, raster.media_type, raster.filename)


class ValidationWarningResponse(BaseModel):
    session_id: str
    severity: str
    code: str
    message: str


class ValidateResponse(BaseModel):
    total_sessions: int
    total_points: int
    error_count: int
    warning_count: int
    is_valid: bool
    errors: list[ValidationWarningResponse]
    warnings: list[ValidationWarningResponse]
    info: list[ValidationWarningResponse]


@router.get("/validate", response_model=ValidateResponse)
async def validate():
    """Validate all annotations in the workspace."""
    report = validate_workspace(get_workspace().snapshots())

    def to_response(items):
        return [
            ValidationWarningResponse(
                session_id=w.session_id,
                severity=w.severity,
                code=w.code,
                message=w.message,
            )
            for w in items
        ]

    return ValidateResponse(
        total_sessions=report.total_sessions,
        total_points=report.total_points,
        error_count=report.error_count,
        warning_count=report.warning_count,
        is_valid=report.is_valid,
        errors=to_response(report.errors),
        warnings=to_response(report.warnings),
        info=to_response(report.info),
    )
