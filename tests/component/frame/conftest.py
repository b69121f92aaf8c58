"""
Component Test Fixtures for Frame Service

Runs the FastAPI app through TestClient against a temp data directory,
with the canvas HTTP client replaced by a recorder.
"""

import random
import sys
import os
from pathlib import Path
from unittest.mock import patch

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from core.config import FrameServiceConfig
from microservices.frame_service.factory import FrameServiceFactory

from tests.fixtures import CANVAS_URL


@pytest.fixture
def data_dir(tmp_path) -> Path:
    return tmp_path / "data"


@pytest.fixture
def frame_config(data_dir) -> FrameServiceConfig:
    """Config pointing at the temp data dir; mutate in a test to change behavior"""
    return FrameServiceConfig(
        data_dir=str(data_dir),
        server_url="",
        canvas_url=CANVAS_URL,
        cron_interval_hours=2,
    )


@pytest.fixture
def client(frame_config, canvas_client):
    """Create FastAPI test client with a temp data dir and recording canvas client"""
    from fastapi.testclient import TestClient

    def build_factory(config):
        return FrameServiceFactory(config, canvas_client=canvas_client, rng=random.Random(7))

    with patch("microservices.frame_service.main.get_settings", return_value=frame_config), \
         patch("microservices.frame_service.main.FrameServiceFactory", side_effect=build_factory):

        from microservices.frame_service.main import app

        with TestClient(app, raise_server_exceptions=False) as test_client:
            yield test_client


@pytest.fixture
def upload(client, jpeg_bytes):
    """Upload helper returning the response payload"""
    def _upload(orientation: str = "P", contents: bytes = None):
        response = client.post(
            f"/upload?orientation={orientation}",
            content=jpeg_bytes if contents is None else contents,
            headers={"Content-Type": "image/jpeg"},
        )
        assert response.status_code == 200, response.text
        return response.json()["data"]
    return _upload
