"""
QA Validation Engine for annotations.

Validates session annotations for common issues:
- Image still loading
- Empty polygon or fewer than 3 vertices
- Zero or tiny enclosed area
- Vertices dragged outside the display area
"""

from dataclasses import dataclass
from typing import Sequence

from core.models import SessionSnapshot, SessionState
from core.polygons import polygon_area, points_outside


@dataclass
class ValidationWarning:
    """A validation warning."""
    session_id: str
    severity: str  # 'error', 'warning', 'info'
    code: str
    message: str


def validate_snapshot(
    snapshot: SessionSnapshot,
    min_area_ratio: float = 0.0001,  # 0.01% of display area
) -> list[ValidationWarning]:
    """
    Validate a single session snapshot.

    Args:
        snapshot: The session to validate
        min_area_ratio: Minimum enclosed area as ratio of display area

    Returns:
        List of validation warnings
    """
    warnings = []
    sid = snapshot.session_id

    if snapshot.state == SessionState.LOADING:
        warnings.append(ValidationWarning(
            session_id=sid,
            severity='error',
            code='IMAGE_NOT_LOADED',
            message=f'{snapshot.image_name} has not finished loading'
        ))
        return warnings

    polygon = [(p.x, p.y) for p in snapshot.points]
    num_points = len(polygon)

    if num_points == 0:
        warnings.append(ValidationWarning(
            session_id=sid,
            severity='error',
            code='POLYGON_EMPTY',
            message='Annotation has no points'
        ))
        return warnings

    if num_points < 3:
        warnings.append(ValidationWarning(
            session_id=sid,
            severity='error',
            code='POLYGON_TOO_FEW_POINTS',
            message=f'Polygon has only {num_points} points (minimum 3 required)'
        ))

    width = snapshot.dimensions.width
    height = snapshot.dimensions.height

    # Check all points are inside the display area
    outside = points_outside(polygon, width, height)
    if outside:
        i = outside[0]
        x, y = polygon[i]
        warnings.append(ValidationWarning(
            session_id=sid,
            severity='warning',
            code='POLYGON_POINT_OUT_OF_BOUNDS',
            message=(
                f'{len(outside)} point(s) outside the image; '
                f'first is point {i} ({x:.1f}, {y:.1f})'
            )
        ))

    area = polygon_area(polygon)
    display_area = width * height
    if num_points >= 3 and display_area > 0 and area / display_area < min_area_ratio:
        warnings.append(ValidationWarning(
            session_id=sid,
            severity='warning',
            code='POLYGON_TOO_SMALL',
            message=f'Polygon area ({area / display_area * 100:.4f}% of image) is very small'
        ))

    return warnings


@dataclass
class WorkspaceValidationReport:
    """Validation report for all sessions in a workspace."""
    total_sessions: int
    total_points: int
    errors: list[ValidationWarning]
    warnings: list[ValidationWarning]
    info: list[ValidationWarning]

    @property
    def is_valid(self) -> bool:
        """Workspace is valid if there are no errors."""
        return len(self.errors) == 0

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)

    def summary(self) -> str:
        """Get a summary string."""
        return (
            f"Validation Report:\n"
            f"  Images: {self.total_sessions}\n"
            f"  Points: {self.total_points}\n"
            f"  Errors: {self.error_count}\n"
            f"  Warnings: {self.warning_count}\n"
            f"  Valid: {'Yes' if self.is_valid else 'No'}"
        )


def validate_workspace(snapshots: Sequence[SessionSnapshot]) -> WorkspaceValidationReport:
    """
    Validate all session snapshots.

    Args:
        snapshots: Snapshots in workspace order

    Returns:
        WorkspaceValidationReport with all issues found
    """
    all_warnings = []
    for snapshot in snapshots:
        all_warnings.extend(validate_snapshot(snapshot))

    if not snapshots:
        all_warnings.append(ValidationWarning(
            session_id='',
            severity='info',
            code='NO_IMAGES',
            message='Workspace has no images'
        ))

    # Separate by severity
    errors = [w for w in all_warnings if w.severity == 'error']
    warnings = [w for w in all_warnings if w.severity == 'warning']
    info = [w for w in all_warnings if w.severity == 'info']

    return WorkspaceValidationReport(
        total_sessions=len(snapshots),
        total_points=sum(len(s.points) for s in snapshots),
        errors=errors,
        warnings=warnings,
        info=info,
    )
