"""
Shared Test Fixtures

Centralized factories and test doubles used across all test layers.

Structure:
    - frame_fixtures.py: Frame service factories, clock, canvas recorder
"""

from .frame_fixtures import (
    CANVAS_URL,
    DEFAULT_PLAYLIST_ID,
    JPEG_BYTES,
    SERVER_URL,
    FixedClock,
    RecordingCanvasClient,
    make_image_id,
    make_index,
    make_photo_entry,
    make_playlist,
    make_playlist_id,
    make_quiet_hours,
)

__all__ = [
    "CANVAS_URL",
    "DEFAULT_PLAYLIST_ID",
    "JPEG_BYTES",
    "SERVER_URL",
    "FixedClock",
    "RecordingCanvasClient",
    "make_image_id",
    "make_index",
    "make_photo_entry",
    "make_playlist",
    "make_playlist_id",
    "make_quiet_hours",
]
