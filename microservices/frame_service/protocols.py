"""
Frame Service Protocols (Interfaces)

These interfaces define contracts for dependency injection.
NO import-time I/O dependencies - safe to import anywhere.
"""
from datetime import datetime
from typing import List, Optional, Protocol, runtime_checkable

from .models import Battery, IndexFile, Playlist, Settings
from .primitives import CanvasUrl, InvalidValueError, ServerUrl


# =============================================================================
# Custom Exceptions (defined here to avoid importing repository)
# =============================================================================


class FrameServiceError(Exception):
    """Base exception for the frame service"""
    pass


class StorageError(FrameServiceError):
    """Raised when a write to the data directory fails"""
    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Storage failure at {path}: {message}")


class ImageFileNotFoundError(FrameServiceError):
    """Raised when a stored image blob does not exist"""
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Image not found: {name}")


class EmptyUploadError(InvalidValueError):
    """Raised when an upload carries no bytes"""
    kind = "empty_body"

    def __init__(self):
        super().__init__("Empty body")


class DeviceCommandError(FrameServiceError):
    """Raised when the frame rejects or does not answer a command"""
    def __init__(self, canvas_url: str, message: str):
        self.canvas_url = canvas_url
        super().__init__(f"Failed to configure canvas at {canvas_url}: {message}")


# =============================================================================
# Repository Protocol
# =============================================================================


@runtime_checkable
class FrameRepositoryProtocol(Protocol):
    """Durable storage for the index, settings, playlists, battery and blobs"""

    async def load_index(self) -> IndexFile:
        ...

    async def save_index(self, index: IndexFile) -> None:
        ...

    async def load_settings(self) -> Settings:
        ...

    async def save_settings(self, settings: Settings) -> None:
        ...

    async def get_playlist(self, playlist_id: str) -> Optional[Playlist]:
        ...

    async def save_playlist(self, playlist: Playlist) -> None:
        ...

    async def get_battery(self) -> Optional[Battery]:
        ...

    async def save_battery(self, battery: Battery) -> None:
        ...

    async def write_image(self, file_name: str, contents: bytes) -> None:
        ...

    async def read_image(self, file_name: str) -> bytes:
        ...

    async def image_exists(self, file_name: str) -> bool:
        ...

    async def list_image_files(self) -> List[str]:
        ...

    async def delete_all_images(self) -> int:
        ...


# =============================================================================
# Device Protocol
# =============================================================================


@runtime_checkable
class CanvasClientProtocol(Protocol):
    """Commands sent to the physical frame"""

    async def wake_up(self, canvas_url: CanvasUrl, server_url: ServerUrl, cron_time: datetime) -> None:
        """Enable upstream pulling against ``server_url``"""
        ...

    async def sleep(self, canvas_url: CanvasUrl, server_url: ServerUrl) -> None:
        """Disable upstream pulling"""
        ...

    async def close(self) -> None:
        ...


__all__ = [
    "FrameServiceError",
    "StorageError",
    "ImageFileNotFoundError",
    "EmptyUploadError",
    "DeviceCommandError",
    "InvalidValueError",
    "FrameRepositoryProtocol",
    "CanvasClientProtocol",
]
