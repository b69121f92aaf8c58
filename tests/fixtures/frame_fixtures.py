"""
Frame Service Fixtures

Factories for frame service test data, a controllable clock and a
recording stand-in for the canvas HTTP client.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from microservices.frame_service.models import (
    IndexFile,
    PhotoEntry,
    Playlist,
    PlaylistStatus,
    QuietHours,
)
from microservices.frame_service.primitives import (
    CanvasUrl,
    Hour,
    ImageId,
    Orientation,
    PlaylistId,
    QuietHour,
    Timezone,
)
from microservices.frame_service.protocols import DeviceCommandError

# SOI + APP0 marker + padding + EOI
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00\xff\xd9"

CANVAS_URL = "http://canvas.local"
SERVER_URL = "http://frame-server.local:3000"
DEFAULT_PLAYLIST_ID = "8d0fc632-378b-4fac-903c-96b4feb7d1c4"


def make_image_id() -> ImageId:
    """Generate a unique image ID"""
    return ImageId(str(uuid.uuid4()))


def make_playlist_id() -> PlaylistId:
    return PlaylistId(str(uuid.uuid4()))


def make_photo_entry(
    image_id: Optional[str] = None,
    orientation: Orientation = Orientation.PORTRAIT,
    added_at: Optional[datetime] = None,
) -> PhotoEntry:
    """Create an index entry stored as ``<id>.jpg``"""
    return PhotoEntry(
        file=f"{image_id or make_image_id()}.jpg",
        orientation=orientation,
        added_at=added_at or datetime.now(timezone.utc),
    )


def make_index(count: int = 3) -> IndexFile:
    return IndexFile(photos=[make_photo_entry() for _ in range(count)])


def make_quiet_hours(
    timezone_name: str = "UTC",
    start: int = 22,
    end: int = 6,
    enabled: bool = True,
) -> QuietHours:
    return QuietHours(
        enabled=enabled,
        timezone=Timezone(timezone_name),
        start=QuietHour(start),
        end=QuietHour(end),
    )


def make_playlist(
    playlist_id: Optional[str] = None,
    image_ids: Optional[List[str]] = None,
    status: PlaylistStatus = PlaylistStatus.IN_PROGRESS,
    cron_interval_in_hours: float = 2,
    quiet_hours: Optional[QuietHours] = None,
) -> Playlist:
    return Playlist(
        id=PlaylistId(playlist_id or DEFAULT_PLAYLIST_ID),
        status=status,
        canvas_url=CanvasUrl(CANVAS_URL),
        cron_interval_in_hours=Hour(cron_interval_in_hours),
        available_images_id=[ImageId(i) for i in (image_ids or [])],
        quiet_hours=quiet_hours,
    )


class FixedClock:
    """Callable clock returning a settable instant"""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2025, 11, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingCanvasClient:
    """Canvas client stand-in that records commands instead of sending them"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    async def wake_up(self, canvas_url, server_url, cron_time) -> None:
        self.calls.append({
            "command": "wake_up",
            "canvas_url": str(canvas_url),
            "server_url": str(server_url),
            "cron_time": cron_time,
        })
        if self.fail:
            raise DeviceCommandError(str(canvas_url), "503 unavailable")

    async def sleep(self, canvas_url, server_url) -> None:
        self.calls.append({
            "command": "sleep",
            "canvas_url": str(canvas_url),
            "server_url": str(server_url),
        })
        if self.fail:
            raise DeviceCommandError(str(canvas_url), "503 unavailable")

    async def close(self) -> None:
        self.closed = True

    def commands(self) -> List[str]:
        return [call["command"] for call in self.calls]
