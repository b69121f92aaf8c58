"""
Root conftest.py - Global fixtures and configuration for all test layers.

Test Layers:
    - component/  : FastAPI app against a temp data directory
    - unit/       : Pure logic, file store, engine with in-memory repository
"""
import os
import sys

import pytest

# Set testing environment BEFORE any imports
os.environ.setdefault("ENV", "testing")

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from tests.fixtures import (
    JPEG_BYTES,
    FixedClock,
    RecordingCanvasClient,
)


@pytest.fixture
def jpeg_bytes() -> bytes:
    """Minimal JPEG payload"""
    return JPEG_BYTES


@pytest.fixture
def clock() -> FixedClock:
    """Clock pinned to 2025-11-01T09:00:00Z"""
    return FixedClock()


@pytest.fixture
def canvas_client() -> RecordingCanvasClient:
    return RecordingCanvasClient()


@pytest.fixture
def failing_canvas_client() -> RecordingCanvasClient:
    return RecordingCanvasClient(fail=True)
