"""
Backend configuration
"""

import os

from core.models import AnnotationSettings

# API settings
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# CORS origins (frontend URL)
CORS_ORIGINS = os.getenv(
    "CORS_ORIGINS", "http://localhost:5173,http://127.0.0.1:5173"
).split(",")

# Annotation engine settings
MAX_DISPLAY_WIDTH = float(os.getenv("MAX_DISPLAY_WIDTH", "600"))
DEFAULT_VERTEX_COUNT = int(os.getenv("DEFAULT_VERTEX_COUNT", "16"))
RADIUS_RATIO = float(os.getenv("RADIUS_RATIO", "0.35"))
INSERT_THRESHOLD = float(os.getenv("INSERT_THRESHOLD", "15"))
MAX_IMAGES = int(os.getenv("MAX_IMAGES", "2"))


def annotation_settings() -> AnnotationSettings:
    """Build engine settings from the environment."""
    return AnnotationSettings(
        max_display_width=MAX_DISPLAY_WIDTH,
        default_vertex_count=DEFAULT_VERTEX_COUNT,
        radius_ratio=RADIUS_RATIO,
        insert_threshold=INSERT_THRESHOLD,
        max_sessions=MAX_IMAGES,
    )
