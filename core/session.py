"""
Annotation sessions and the workspace that hosts them.

A session owns one image, its display dimensions, and one editable
polygon. The workspace keeps at most `max_sessions` of them in upload
order.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from core.errors import (
    ImageDecodeError, SessionNotFoundError, SessionRemovedError,
    UserInputRejected, WorkspaceFullError,
)
from core.images import decode_image_size
from core.models import (
    AnnotationSettings, Dimensions, ImageHandle, Point,
    SessionSnapshot, SessionState,
)
from core.polygons import Polygon
from core.projection import EdgeProjection
from core.shapes import compute_display_dimensions

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], tuple[int, int]]


class AnnotationSession:
    """
    Per-image annotation state.

    All operations run to completion and leave the session valid.
    """

    def __init__(
        self,
        session_id: str,
        image: ImageHandle,
        settings: Optional[AnnotationSettings] = None,
    ):
        self.id = session_id
        self.image = image
        self.settings = settings or AnnotationSettings()
        self.polygon = Polygon()
        self.dimensions = Dimensions(0.0, 0.0)
        self.state = SessionState.LOADING
        # UI highlight only; never read by geometry or export
        self.selected_index: Optional[int] = None

    def __repr__(self) -> str:
        return (
            f"AnnotationSession(id={self.id!r}, image={self.image.name!r}, "
            f"state={self.state.value}, points={len(self.polygon)})"
        )

    def _check_alive(self):
        if self.state == SessionState.REMOVED:
            raise SessionRemovedError(f"Session {self.id} has been removed")

    @property
    def is_loaded(self) -> bool:
        return self.state in (SessionState.ANNOTATED, SessionState.EDITING)

    # ==================== Lifecycle ====================

    def load(self, decoder: Decoder = decode_image_size):
        """
        Decode the image, size it for display and install the default shape.

        Raises:
            ImageDecodeError: The session stays in LOADING
        """
        self._check_alive()
        try:
            natural_width, natural_height = decoder(self.image.data)
        except ImageDecodeError:
            logger.warning(f"Session {self.id}: could not decode {self.image.name}")
            raise

        self.dimensions = compute_display_dimensions(
            natural_width, natural_height, self.settings.max_display_width
        )
        self._reset_polygon()
        self.state = SessionState.ANNOTATED
        logger.info(
            f"Session {self.id}: loaded {self.image.name} "
            f"({natural_width}x{natural_height} -> "
            f"{self.dimensions.width:.0f}x{self.dimensions.height:.0f})"
        )

    def release(self):
        """Free the image bytes and mark the session removed."""
        self.image.release()
        self.selected_index = None
        self.state = SessionState.REMOVED

    # ==================== Editing ====================

    def begin_drag(self, index: int):
        self._check_alive()
        if self.is_loaded and 0 <= index < len(self.polygon):
            self.state = SessionState.EDITING

    def drag(self, index: int, point: Point) -> bool:
        """Move vertex `index` to `point`. Out-of-range indices are ignored."""
        self._check_alive()
        return self.polygon.replace(index, point)

    def end_drag(self):
        self._check_alive()
        if self.state == SessionState.EDITING:
            self.state = SessionState.ANNOTATED

    def insert_at(self, click: Point) -> Optional[EdgeProjection]:
        """Add a vertex where `click` hits the outline, if it is close enough."""
        self._check_alive()
        return self.polygon.insert_at_click(click, self.settings.insert_threshold)

    def reset(self) -> bool:
        """Restore the default shape. No-op before the image is loaded."""
        self._check_alive()
        if self.dimensions.is_empty:
            return False
        self._reset_polygon()
        self.selected_index = None
        return True

    def _reset_polygon(self):
        self.polygon.reset(
            self.dimensions.width,
            self.dimensions.height,
            self.settings.default_vertex_count,
            self.settings.radius_ratio,
        )

    def select(self, index: int) -> bool:
        self._check_alive()
        if not 0 <= index < len(self.polygon):
            return False
        self.selected_index = index
        return True

    def clear_selection(self):
        self.selected_index = None

    # ==================== Reading ====================

    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.id,
            image_name=self.image.name,
            content_type=self.image.content_type,
            image_bytes=self.image.data,
            points=tuple(self.polygon),
            dimensions=self.dimensions,
            state=self.state,
        )

    def save(self) -> dict:
        """
        Report the current annotation to the log.

        Raises:
            UserInputRejected: If there are no points
        """
        self._check_alive()
        if self.polygon.is_empty:
            raise UserInputRejected("No annotation data!")

        record = {
            "image": self.image.name,
            "points": self.polygon.to_dicts(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        logger.info(f"Annotation data: {record}")
        return record


class Workspace:
    """
    Holds the live annotation sessions, keyed by id, in upload order.
    """

    def __init__(
        self,
        settings: Optional[AnnotationSettings] = None,
        decoder: Decoder = decode_image_size,
    ):
        self.settings = settings or AnnotationSettings()
        self.decoder = decoder
        self._sessions: dict[str, AnnotationSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    @property
    def is_full(self) -> bool:
        return len(self._sessions) >= self.settings.max_sessions

    def create_session(self, image: ImageHandle, session_id: Optional[str] = None) -> str:
        """
        Accept an image into the workspace and load it.

        The session is registered even if decoding fails, in which case it
        stays in LOADING and the ImageDecodeError propagates.

        Returns:
            The new session id
        """
        if self.is_full:
            raise WorkspaceFullError(
                f"Maximum {self.settings.max_sessions} images allowed!"
            )

        session_id = session_id or image.id or uuid.uuid4().hex
        if session_id in self._sessions:
            raise ValueError(f"Session id already in use: {session_id}")

        session = AnnotationSession(session_id, image, self.settings)
        self._sessions[session_id] = session
        logger.info(f"Created session {session_id} for {image.name}")

        session.load(self.decoder)
        return session_id

    def remove_session(self, session_id: str):
        session = self.get_session(session_id)
        session.release()
        del self._sessions[session_id]
        logger.info(f"Removed session {session_id}")

    def get_session(self, session_id: str) -> AnnotationSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(f"Session not found: {session_id}") from None

    def get_snapshot(self, session_id: str) -> SessionSnapshot:
        return self.get_session(session_id).snapshot()

    def sessions(self) -> list[AnnotationSession]:
        return list(self._sessions.values())

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def snapshots(self) -> list[SessionSnapshot]:
        return [s.snapshot() for s in self._sessions.values()]

    def clear(self):
        for session_id in list(self._sessions):
            self.remove_session(session_id)
