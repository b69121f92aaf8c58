"""
Frame Service Business Logic

Photo uploads, bulk clearing, rotation settings, the settings-driven
fallback rotation, battery caching and image lookup.

Uses dependency injection for testability:
- Repository is injected, not created at import time
- Random source and clock are injectable
"""

import asyncio
import logging
import random
from datetime import datetime
from pathlib import PurePosixPath
from typing import Any, Callable, List, Optional, Tuple

from .models import (
    Battery,
    Image,
    IndexEmpty,
    IndexFile,
    NextImage,
    PhotoEntry,
    Settings,
    SettingsPullOutcome,
    SettingsUpdate,
    UploadResult,
)
from .primitives import (
    BatteryPercentage,
    ImageId,
    InvalidOrientationError,
    InvalidValueError,
    Orientation,
    parse_upload_filename,
    safe_image_name,
)
from .protocols import EmptyUploadError, FrameRepositoryProtocol, ImageFileNotFoundError
from .schedule import next_cron_time, utc_now

logger = logging.getLogger(__name__)


class FrameService:
    """
    Frame business logic service

    Index and settings writes (upload, clear, patch, cursor advance) are
    serialized with an in-process lock so concurrent uploads never drop
    an entry.
    """

    def __init__(
        self,
        repository: FrameRepositoryProtocol,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repo = repository
        self.rng = rng or random.Random()
        self.clock = clock
        self._write_lock = asyncio.Lock()

    # ==================== Upload ====================

    async def upload(
        self,
        contents: bytes,
        orientation: Optional[str] = None,
        filename: Optional[str] = None,
    ) -> UploadResult:
        """
        Store an uploaded JPEG and append it to the index

        The orientation comes from ``orientation`` (``P``/``L``) or, for
        older clients, from the ``_P``/``_L`` suffix of ``filename``.
        The blob is always stored as ``<uuid>.jpg``.

        Raises:
            InvalidValueError: Bad orientation / filename, or an empty body
        """
        parsed = self._upload_orientation(orientation, filename)
        if not contents:
            raise EmptyUploadError()

        image_id = ImageId.random()
        file_name = f"{image_id}.jpg"
        entry = PhotoEntry(file=file_name, orientation=parsed, added_at=self.clock())

        async with self._write_lock:
            await self.repo.write_image(file_name, contents)
            index = await self.repo.load_index()
            await self.repo.save_index(IndexFile(photos=[*index.photos, entry]))

        image = Image.from_entry(entry)
        logger.info(f"Stored upload {file_name} ({parsed.value}, {len(contents)} bytes)")
        return UploadResult(id=image.id, url=image.url, file=file_name)

    @staticmethod
    def _upload_orientation(orientation: Optional[str], filename: Optional[str]) -> Orientation:
        if orientation is not None:
            return Orientation.parse(orientation)
        if filename is not None:
            _, parsed = parse_upload_filename(filename)
            return parsed
        raise InvalidOrientationError("Orientation must be 'P' or 'L', received: None")

    async def delete_all(self) -> int:
        """Remove every blob and reset the index; returns the number of files removed"""
        async with self._write_lock:
            deleted = await self.repo.delete_all_images()
            await self.repo.save_index(IndexFile())
        logger.info(f"Cleared {deleted} image file(s)")
        return deleted

    # ==================== Settings ====================

    async def get_settings(self) -> Settings:
        return await self.repo.load_settings()

    async def update_settings(self, body: Any) -> Settings:
        """Apply a partial patch; invalid fields keep their stored value"""
        if not isinstance(body, dict):
            raise InvalidValueError("Body must be a JSON object", body)

        async with self._write_lock:
            current = await self.repo.load_settings()
            updated = current.apply_update(SettingsUpdate.from_body(body))
            await self.repo.save_settings(updated)
        return updated

    # ==================== Settings-driven rotation ====================

    async def pull_by_settings(self) -> SettingsPullOutcome:
        """
        Pick a photo without a playlist: random when ``shuffle`` is on,
        round-robin over the index via ``cursor`` otherwise.
        """
        async with self._write_lock:
            index = await self.repo.load_index()
            settings = await self.repo.load_settings()
            next_time = next_cron_time(settings.interval_hours, self.clock())

            photos = [entry for entry in index.photos if entry.image_id is not None]
            if not photos:
                return IndexEmpty(next_cron_time=next_time)

            entry, updated = self._pick_photo(photos, settings)
            if updated.cursor != settings.cursor:
                await self.repo.save_settings(updated)

        return NextImage(next_image=Image.from_entry(entry), displayed_at=next_time)

    def _pick_photo(self, photos: List[PhotoEntry], settings: Settings) -> Tuple[PhotoEntry, Settings]:
        if settings.shuffle:
            return self.rng.choice(photos), settings

        position = settings.cursor % len(photos)
        advanced = settings.model_copy(update={"cursor": (position + 1) % len(photos)})
        return photos[position], advanced

    # ==================== Battery ====================

    async def record_battery(self, raw: Any) -> Battery:
        """
        Cache a battery report; a full charge stamps ``lastFullChargeDate``

        Raises:
            InvalidPercentageError: If ``raw`` is not 0-100
        """
        percentage = BatteryPercentage(raw)
        previous = await self.repo.get_battery()

        last_full = previous.last_full_charge_date if previous else None
        if percentage == 100:
            last_full = self.clock()

        battery = Battery(percentage=percentage, last_full_charge_date=last_full)
        await self.repo.save_battery(battery)
        return battery

    async def get_battery(self) -> Optional[Battery]:
        return await self.repo.get_battery()

    # ==================== Images ====================

    async def read_image(self, name: str) -> Tuple[str, bytes]:
        """
        Look up image bytes by id or stored file name

        Accepts ``<id>``, ``<id>.jpg``, ``<id>.jpeg`` or any stored name.

        Raises:
            InvalidFilenameError: Unsafe name
            ImageFileNotFoundError: No matching blob
        """
        safe_name = safe_image_name(name)
        for candidate in self._image_candidates(safe_name):
            if await self.repo.image_exists(candidate):
                return candidate, await self.repo.read_image(candidate)
        raise ImageFileNotFoundError(safe_name)

    @staticmethod
    def _image_candidates(name: str) -> List[str]:
        candidates = [name]
        path = PurePosixPath(name)
        stem = path.stem if path.suffix in (".jpg", ".jpeg") else name
        if ImageId.is_valid(stem) and f"{stem}.jpg" not in candidates:
            candidates.append(f"{stem}.jpg")
        return candidates


__all__ = ["FrameService"]
