"""
Shared fixtures.
"""

import io

import pytest
from PIL import Image


@pytest.fixture
def make_image_bytes():
    """Factory for encoded in-memory test images."""
    def _make(width=1200, height=800, color='red', fmt='PNG'):
        img = Image.new('RGB', (width, height), color=color)
        buffer = io.BytesIO()
        img.save(buffer, format=fmt)
        return buffer.getvalue()
    return _make


@pytest.fixture
def png_bytes(make_image_bytes):
    """A 1200x800 red PNG (displayed at 600x400)."""
    return make_image_bytes()
