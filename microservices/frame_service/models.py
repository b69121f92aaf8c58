"""
Frame Service Data Models

Pydantic models for the photo index, rotation settings, playlists, the
device wire envelopes, and the outcomes returned by the playlist engine.

Persisted and API-facing domain models use camelCase JSON keys
(``intervalHours``, ``availableImagesId``...) through an alias generator;
Python code uses the snake_case attribute names.
"""

import math
from datetime import datetime
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .primitives import (
    BatteryPercentage,
    CanvasDate,
    CanvasUrl,
    MAX_INTERVAL_HOURS,
    Hour,
    ImageId,
    ImageUrl,
    Orientation,
    PlaylistId,
    QuietHour,
    Timezone,
)


class CamelModel(BaseModel):
    """Base for models stored on disk / exposed with camelCase keys"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self, **kwargs) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


# ====================
# Enum Types
# ====================

class PlaylistStatus(str, Enum):
    """Playlist lifecycle status"""
    IN_PROGRESS = "in-progress"
    STOP = "stop"


# ====================
# Photo Index
# ====================

class PhotoEntry(CamelModel):
    """One uploaded photo in the index (immutable)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    file: str = Field(..., min_length=1, description="Stored file name under data/images")
    orientation: Orientation
    added_at: datetime

    @property
    def image_id(self) -> Optional[ImageId]:
        stem = PurePosixPath(self.file).stem
        return ImageId(stem) if ImageId.is_valid(stem) else None


class IndexFile(CamelModel):
    """Ordered list of uploaded photos (append-only until cleared)"""
    photos: List[PhotoEntry] = Field(default_factory=list)

    def image_ids(self) -> List[ImageId]:
        """Distinct image ids in insertion order"""
        seen = set()
        ids = []
        for entry in self.photos:
            image_id = entry.image_id
            if image_id is not None and image_id not in seen:
                seen.add(image_id)
                ids.append(image_id)
        return ids

    def find(self, image_id: str) -> Optional[PhotoEntry]:
        for entry in self.photos:
            if entry.image_id == image_id:
                return entry
        return None


class Image(CamelModel):
    """A stored image resolved from the index"""
    id: ImageId
    file: str
    orientation: Orientation
    added_at: datetime
    url: ImageUrl

    @classmethod
    def from_entry(cls, entry: PhotoEntry) -> "Image":
        return cls(
            id=entry.image_id,
            file=entry.file,
            orientation=entry.orientation,
            added_at=entry.added_at,
            url=ImageUrl(f"/images/{entry.file}"),
        )


# ====================
# Settings
# ====================

class Settings(CamelModel):
    """Rotation settings (singleton)"""
    interval_hours: float = Field(default=2, ge=1, le=MAX_INTERVAL_HOURS, allow_inf_nan=False)
    shuffle: bool = True
    cursor: int = Field(default=0, ge=0)

    def apply_update(self, update: "SettingsUpdate") -> "Settings":
        """Return a copy with the valid fields of ``update`` applied"""
        changes = {}
        if update.interval_hours is not None:
            changes["interval_hours"] = update.interval_hours
        if update.shuffle is not None:
            changes["shuffle"] = update.shuffle
        return self.model_copy(update=changes)


class SettingsUpdate(BaseModel):
    """Partial settings patch; only individually valid fields are kept"""
    interval_hours: Optional[float] = None
    shuffle: Optional[bool] = None

    @classmethod
    def from_body(cls, body: Dict[str, Any]) -> "SettingsUpdate":
        interval = body.get("intervalHours")
        shuffle = body.get("shuffle")

        valid_interval = (
            isinstance(interval, (int, float))
            and not isinstance(interval, bool)
            and math.isfinite(interval)
            and 1 <= interval <= MAX_INTERVAL_HOURS
        )

        return cls(
            interval_hours=interval if valid_interval else None,
            shuffle=shuffle if isinstance(shuffle, bool) else None,
        )


# ====================
# Playlist
# ====================

class QuietHours(CamelModel):
    """Local-time window during which no new image is displayed"""
    enabled: bool = True
    timezone: Timezone
    start: QuietHour
    end: QuietHour


class Playlist(CamelModel):
    """Rotation state for one frame"""
    id: PlaylistId
    status: PlaylistStatus = PlaylistStatus.IN_PROGRESS
    canvas_url: CanvasUrl
    cron_interval_in_hours: Hour
    available_images_id: List[ImageId] = Field(default_factory=list)
    quiet_hours: Optional[QuietHours] = None


# ====================
# Battery
# ====================

class Battery(CamelModel):
    """Battery state last reported by the device"""
    percentage: BatteryPercentage
    last_full_charge_date: Optional[datetime] = None


# ====================
# Engine Outcomes
# ====================

class PlaylistStarted(BaseModel):
    kind: Literal["playlist-started"] = "playlist-started"
    playlist_id: PlaylistId


class PlaylistHalted(BaseModel):
    kind: Literal["playlist-halted"] = "playlist-halted"
    playlist_id: PlaylistId


class PlaylistNotFound(BaseModel):
    kind: Literal["playlist-not-found"] = "playlist-not-found"
    playlist_id: PlaylistId


class PlaylistStopped(BaseModel):
    kind: Literal["playlist-stopped"] = "playlist-stopped"
    playlist_id: PlaylistId


class PlaylistEmpty(BaseModel):
    kind: Literal["playlist-empty"] = "playlist-empty"
    playlist_id: PlaylistId


class ImageNotFound(BaseModel):
    kind: Literal["image-not-found"] = "image-not-found"
    image_id: ImageId


class NextImage(BaseModel):
    kind: Literal["next-image"] = "next-image"
    next_image: Image
    displayed_at: datetime


class IndexEmpty(BaseModel):
    """Settings-driven rotation found no photos"""
    kind: Literal["index-empty"] = "index-empty"
    next_cron_time: datetime


StartOutcome = Union[PlaylistStarted, PlaylistEmpty]
StopOutcome = Union[PlaylistHalted, PlaylistNotFound]
NextImageOutcome = Union[PlaylistNotFound, PlaylistStopped, PlaylistEmpty, ImageNotFound, NextImage]
SettingsPullOutcome = Union[NextImage, IndexEmpty]


# ====================
# Request Models
# ====================

class StartPlaylistRequest(CamelModel):
    """Body of POST /playlist/start"""
    canvas_url: CanvasUrl
    cron_interval_in_hours: Hour
    quiet_hours: Optional[QuietHours] = None


# ====================
# Device Envelopes
# ====================

class CanvasScheduleData(BaseModel):
    next_cron_time: Optional[CanvasDate] = None


class CanvasShowData(CanvasScheduleData):
    image_url: str


class CanvasEnvelope(BaseModel):
    """Response body understood by the frame's pull client"""
    status: int
    type: Optional[str] = None
    message: str
    data: Union[CanvasShowData, CanvasScheduleData]

    def to_wire(self) -> Dict[str, Any]:
        body = self.model_dump(mode="json", exclude_none=True)
        # the stop envelope carries an explicit null
        body["data"].setdefault("next_cron_time", None)
        return body


# ====================
# Response Models
# ====================

class UploadResult(BaseModel):
    id: ImageId
    url: ImageUrl
    file: str


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    port: int
    dependencies: Dict[str, str] = Field(default_factory=dict)


__all__ = [
    "CamelModel",
    "PlaylistStatus",
    "PhotoEntry",
    "IndexFile",
    "Image",
    "Settings",
    "SettingsUpdate",
    "QuietHours",
    "Playlist",
    "Battery",
    "PlaylistStarted",
    "PlaylistHalted",
    "PlaylistNotFound",
    "PlaylistStopped",
    "PlaylistEmpty",
    "ImageNotFound",
    "NextImage",
    "IndexEmpty",
    "StartOutcome",
    "StopOutcome",
    "NextImageOutcome",
    "SettingsPullOutcome",
    "StartPlaylistRequest",
    "CanvasScheduleData",
    "CanvasShowData",
    "CanvasEnvelope",
    "UploadResult",
    "HealthResponse",
]
