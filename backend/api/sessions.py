"""
Sessions API endpoints
"""

import logging
import uuid
from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import Response
from pydantic import BaseModel, ConfigDict
from typing import Optional

from backend.config import annotation_settings
from core.errors import ImageDecodeError
from core.images import detect_content_type
from core.models import ImageHandle, Point
from core.session import AnnotationSession, Workspace

logger = logging.getLogger(__name__)

router = APIRouter()

# Workspace shared by all requests (single user)
_workspace: Optional[Workspace] = None


def get_workspace() -> Workspace:
    """Get the current workspace, creating it on first use."""
    global _workspace
    if _workspace is None:
        _workspace = Workspace(annotation_settings())
    return _workspace


def reset_workspace():
    """Drop all sessions and start a fresh workspace."""
    global _workspace
    if _workspace is not None:
        _workspace.clear()
    _workspace = None


class PointModel(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class DimensionsModel(BaseModel):
    width: float
    height: float


class SessionResponse(BaseModel):
    id: str
    image_name: str
    content_type: str
    state: str
    dimensions: DimensionsModel
    points: list[PointModel]
    selected_index: Optional[int] = None
    message: Optional[str] = None

    @classmethod
    def from_session(cls, session: AnnotationSession, message: Optional[str] = None):
        return cls(
            id=session.id,
            image_name=session.image.name,
            content_type=session.image.content_type,
            state=session.state.value,
            dimensions=DimensionsModel(
                width=session.dimensions.width, height=session.dimensions.height
            ),
            points=[PointModel(x=p.x, y=p.y) for p in session.polygon],
            selected_index=session.selected_index,
            message=message,
        )


class SnapshotResponse(BaseModel):
    imageName: str
    points: list[PointModel]
    dimensions: DimensionsModel


class DragRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float
    final: bool = False  # True on drag end


class ClickRequest(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    x: float
    y: float


class InsertResponse(BaseModel):
    inserted: bool
    edge_index: Optional[int] = None
    point: Optional[PointModel] = None
    distance: Optional[float] = None
    session: SessionResponse


class SelectRequest(BaseModel):
    index: int


class SaveResponse(BaseModel):
    image: str
    points: list[PointModel]
    timestamp: str
    message: str


@router.post("", response_model=SessionResponse, status_code=201)
async def create_session(file: UploadFile = File(...)):
    """Upload an image and start annotating it."""
    workspace = get_workspace()

    data = await file.read()
    content_type = file.content_type
    if not content_type or not content_type.startswith("image/"):
        content_type = detect_content_type(data)

    image = ImageHandle(
        id=uuid.uuid4().hex,
        name=file.filename or "image",
        content_type=content_type,
        data=data,
    )

    try:
        workspace.create_session(image)
    except ImageDecodeError as e:
        # Session stays registered in LOADING so the client can remove it
        logger.warning(f"Upload {image.name}: {e}")
        return SessionResponse.from_session(
            workspace.get_session(image.id), message="Failed to load image"
        )

    session = workspace.get_session(image.id)
    return SessionResponse.from_session(
        session,
        message=(
            "Default circle annotation created automatically. "
            "Drag nodes to adjust or click edges to add new nodes"
        ),
    )


@router.get("", response_model=list[SessionResponse])
async def list_sessions():
    """List sessions in upload order."""
    workspace = get_workspace()
    return [SessionResponse.from_session(s) for s in workspace.sessions()]


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str):
    """Get a session by ID."""
    return SessionResponse.from_session(get_workspace().get_session(session_id))


@router.delete("/{session_id}")
async def delete_session(session_id: str):
    """Remove an image and its annotation."""
    get_workspace().remove_session(session_id)
    return {"status": "deleted", "id": session_id, "message": "Image deleted"}


@router.get("/{session_id}/snapshot", response_model=SnapshotResponse)
async def get_snapshot(session_id: str):
    """Read-only view of the annotation."""
    return get_workspace().get_snapshot(session_id).to_dict()


@router.get("/{session_id}/image")
async def get_image(session_id: str):
    """Serve the original image bytes."""
    session = get_workspace().get_session(session_id)
    return Response(content=session.image.data, media_type=session.image.content_type)


@router.put("/{session_id}/points/{index}", response_model=SessionResponse)
async def drag_point(session_id: str, index: int, request: DragRequest):
    """Move a vertex. Indices outside the polygon are ignored."""
    session = get_workspace().get_session(session_id)

    session.begin_drag(index)
    session.drag(index, Point(request.x, request.y))
    if request.final:
        session.end_drag()

    return SessionResponse.from_session(session)


@router.post("/{session_id}/insert", response_model=InsertResponse)
async def insert_point(session_id: str, request: ClickRequest):
    """Add a vertex on the edge nearest to a click."""
    session = get_workspace().get_session(session_id)

    result = session.insert_at(Point(request.x, request.y))
    if result is None:
        return InsertResponse(inserted=False, session=SessionResponse.from_session(session))

    return InsertResponse(
        inserted=True,
        edge_index=result.edge_index,
        point=PointModel(x=result.point.x, y=result.point.y),
        distance=result.distance,
        session=SessionResponse.from_session(
            session, message=f"New node added! Total {len(session.polygon)} nodes"
        ),
    )


@router.post("/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str):
    """Restore the default circle annotation."""
    session = get_workspace().get_session(session_id)

    if not session.reset():
        raise HTTPException(status_code=409, detail="Image has not finished loading")

    return SessionResponse.from_session(session, message="Reset to default circle annotation")


@router.put("/{session_id}/selection", response_model=SessionResponse)
async def select_point(session_id: str, request: SelectRequest):
    """Highlight a vertex."""
    session = get_workspace().get_session(session_id)

    if not session.select(request.index):
        raise HTTPException(status_code=404, detail="Point not found")

    return SessionResponse.from_session(session)


@router.delete("/{session_id}/selection", response_model=SessionResponse)
async def clear_selection(session_id: str):
    """Clear the highlighted vertex."""
    session = get_workspace().get_session(session_id)
    session.clear_selection()
    return SessionResponse.from_session(session)


@router.post("/{session_id}/save", response_model=SaveResponse)
async def save_session(session_id: str):
    """Report the current annotation to the server log."""
    record = get_workspace().get_session(session_id).save()
    return SaveResponse(**record, message="Annotation data saved")
