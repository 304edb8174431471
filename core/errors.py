"""
Exceptions raised by the annotation core.
"""


class AnnotatorError(Exception):
    """Base class for all annotation core errors."""


class UserInputRejected(AnnotatorError):
    """The request was refused because there is nothing to act on."""


class ResourceUnavailable(AnnotatorError):
    """Encoding or drawing could not be performed; no artifact was produced."""


class ImageDecodeError(AnnotatorError):
    """The source image bytes could not be decoded."""


class SessionNotFoundError(AnnotatorError):
    """No session with the requested id exists in the workspace."""


class SessionRemovedError(AnnotatorError):
    """The session has already been removed from the workspace."""


class WorkspaceFullError(AnnotatorError):
    """The workspace already holds the maximum number of images."""
