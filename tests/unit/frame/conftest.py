"""
Unit Test Fixtures for Frame Service

Provides an in-memory repository and engine fixtures for unit testing.
"""

import asyncio
import random
from typing import Dict, List, Optional

import pytest

from microservices.frame_service.frame_repository import AtomicFileStore, FrameRepository
from microservices.frame_service.frame_service import FrameService
from microservices.frame_service.models import (
    Battery,
    IndexFile,
    PhotoEntry,
    Playlist,
    Settings,
)
from microservices.frame_service.playlist_service import PlaylistService
from microservices.frame_service.protocols import ImageFileNotFoundError

from tests.fixtures import make_photo_entry


# ====================
# Mock Repository
# ====================


class MockFrameRepository:
    """
    In-memory repository for unit testing

    Reads and blob writes yield to the event loop so concurrent calls
    interleave the way they do against the file store.
    """

    def __init__(self):
        self.index = IndexFile()
        self.settings = Settings()
        self.playlists: Dict[str, Playlist] = {}
        self.battery: Optional[Battery] = None
        self.blobs: Dict[str, bytes] = {}
        self.playlist_writes = 0

    async def load_index(self) -> IndexFile:
        await asyncio.sleep(0)
        return self.index

    async def save_index(self, index: IndexFile) -> None:
        self.index = index

    async def load_settings(self) -> Settings:
        return self.settings

    async def save_settings(self, settings: Settings) -> None:
        self.settings = settings

    async def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        await asyncio.sleep(0)
        return self.playlists.get(playlist_id)

    async def save_playlist(self, playlist: Playlist) -> None:
        self.playlist_writes += 1
        self.playlists[playlist.id] = playlist

    async def get_battery(self) -> Optional[Battery]:
        return self.battery

    async def save_battery(self, battery: Battery) -> None:
        self.battery = battery

    async def write_image(self, file_name: str, contents: bytes) -> None:
        self.blobs[file_name] = contents
        await asyncio.sleep(0)

    async def read_image(self, file_name: str) -> bytes:
        if file_name not in self.blobs:
            raise ImageFileNotFoundError(file_name)
        return self.blobs[file_name]

    async def image_exists(self, file_name: str) -> bool:
        return file_name in self.blobs

    async def list_image_files(self) -> List[str]:
        return sorted(self.blobs)

    async def delete_all_images(self) -> int:
        count = len(self.blobs)
        self.blobs.clear()
        return count

    # Test helpers

    def add_photo(self, entry: Optional[PhotoEntry] = None, with_blob: bool = True) -> PhotoEntry:
        entry = entry or make_photo_entry()
        self.index = IndexFile(photos=[*self.index.photos, entry])
        if with_blob:
            self.blobs[entry.file] = b"jpeg"
        return entry


# ====================
# Fixtures
# ====================


@pytest.fixture
def mock_repository() -> MockFrameRepository:
    return MockFrameRepository()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def playlist_service(mock_repository, canvas_client, rng, clock) -> PlaylistService:
    return PlaylistService(
        repository=mock_repository,
        canvas_client=canvas_client,
        rng=rng,
        clock=clock,
    )


@pytest.fixture
def frame_service(mock_repository, rng, clock) -> FrameService:
    return FrameService(repository=mock_repository, rng=rng, clock=clock)


@pytest.fixture
def file_store(tmp_path) -> AtomicFileStore:
    store = AtomicFileStore(str(tmp_path / "data"))
    store.ensure_dirs()
    return store


@pytest.fixture
def file_repository(file_store) -> FrameRepository:
    return FrameRepository(file_store)
