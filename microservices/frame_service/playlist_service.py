"""
Playlist Service Business Logic

The playlist engine: start / next image / stop for a frame's rotation.

A playlist keeps a pool (``availableImagesId``) of images not yet shown in
the current cycle. Each pull removes one image at random from the pool;
an empty pool is refilled from every stored image, so an image never
repeats within a cycle.

The device drives time: nothing here sleeps or schedules. Operations on the
same playlist id are serialized with an in-process lock.
"""

import asyncio
import logging
import random
from datetime import datetime
from typing import Callable, Dict, List, Optional

from .models import (
    Image,
    ImageNotFound,
    NextImage,
    NextImageOutcome,
    Playlist,
    PlaylistEmpty,
    PlaylistHalted,
    PlaylistNotFound,
    PlaylistStarted,
    PlaylistStatus,
    PlaylistStopped,
    QuietHours,
    StartOutcome,
    StopOutcome,
)
from .primitives import CanvasUrl, Hour, ImageId, PlaylistId, ServerUrl
from .protocols import CanvasClientProtocol, FrameRepositoryProtocol
from .schedule import apply_quiet_hours, next_cron_time, utc_now

logger = logging.getLogger(__name__)


class PlaylistService:
    """
    Playlist engine

    Uses dependency injection for testability: the repository, the canvas
    client, the random source and the clock are all injected.
    """

    def __init__(
        self,
        repository: FrameRepositoryProtocol,
        canvas_client: CanvasClientProtocol,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repo = repository
        self.canvas = canvas_client
        self.rng = rng or random.Random()
        self.clock = clock
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, playlist_id: str) -> asyncio.Lock:
        lock = self._locks.get(playlist_id)
        if lock is None:
            lock = self._locks[playlist_id] = asyncio.Lock()
        return lock

    # ==================== Lifecycle ====================

    async def start(
        self,
        server_url: ServerUrl,
        canvas_url: CanvasUrl,
        cron_interval_in_hours: Hour,
        playlist_id: PlaylistId,
        quiet_hours: Optional[QuietHours] = None,
    ) -> StartOutcome:
        """
        Start (or restart) a playlist over every stored image and wake the frame.

        Returns:
            PlaylistEmpty when there are no images (nothing written, no wake),
            PlaylistStarted otherwise

        Raises:
            DeviceCommandError: If the wake command fails (the record is kept)
        """
        async with self._lock_for(playlist_id):
            image_ids = await self._all_image_ids()
            if not image_ids:
                logger.warning(f"Cannot start playlist {playlist_id}: no images stored")
                return PlaylistEmpty(playlist_id=playlist_id)

            playlist = Playlist(
                id=playlist_id,
                status=PlaylistStatus.IN_PROGRESS,
                canvas_url=canvas_url,
                cron_interval_in_hours=cron_interval_in_hours,
                available_images_id=image_ids,
                quiet_hours=quiet_hours,
            )
            await self.repo.save_playlist(playlist)
            logger.info(f"Started playlist {playlist_id} with {len(image_ids)} image(s) for {canvas_url}")

            await self.canvas.wake_up(canvas_url, server_url, self.clock())

        return PlaylistStarted(playlist_id=playlist_id)

    async def next_image(self, playlist_id: PlaylistId) -> NextImageOutcome:
        """Pick the next image of the cycle and consume it from the pool"""
        async with self._lock_for(playlist_id):
            playlist = await self.repo.get_playlist(playlist_id)
            if playlist is None:
                return PlaylistNotFound(playlist_id=playlist_id)
            if playlist.status == PlaylistStatus.STOP:
                return PlaylistStopped(playlist_id=playlist_id)

            pool = list(playlist.available_images_id)
            if not pool:
                pool = await self._all_image_ids()
                if not pool:
                    return PlaylistEmpty(playlist_id=playlist_id)
                logger.info(f"Refilled playlist {playlist_id} with {len(pool)} image(s)")

            image_id = self._pick(pool)
            image = await self._resolve(image_id)
            if image is None:
                logger.warning(f"Playlist {playlist_id} references missing image {image_id}")
                return ImageNotFound(image_id=image_id)

            displayed_at = apply_quiet_hours(
                next_cron_time(playlist.cron_interval_in_hours, self.clock()),
                playlist.quiet_hours,
            )

            remaining = [candidate for candidate in pool if candidate != image_id]
            await self.repo.save_playlist(playlist.model_copy(update={"available_images_id": remaining}))
            logger.info(f"Playlist {playlist_id} picked {image_id}, {len(remaining)} left in cycle")
            return NextImage(next_image=image, displayed_at=displayed_at)

    async def stop(self, playlist_id: PlaylistId, server_url: ServerUrl) -> StopOutcome:
        """
        Stop a playlist (the pool is kept) and put the frame to sleep.

        Raises:
            DeviceCommandError: If the sleep command fails (the stop is kept)
        """
        async with self._lock_for(playlist_id):
            playlist = await self.repo.get_playlist(playlist_id)
            if playlist is None:
                return PlaylistNotFound(playlist_id=playlist_id)

            await self.repo.save_playlist(playlist.model_copy(update={"status": PlaylistStatus.STOP}))
            logger.info(f"Stopped playlist {playlist_id}")

            await self.canvas.sleep(playlist.canvas_url, server_url)

        return PlaylistHalted(playlist_id=playlist_id)

    async def get(self, playlist_id: PlaylistId) -> Optional[Playlist]:
        return await self.repo.get_playlist(playlist_id)

    # ==================== Helpers ====================

    async def _all_image_ids(self) -> List[ImageId]:
        index = await self.repo.load_index()
        return index.image_ids()

    def _pick(self, pool: List[ImageId]) -> ImageId:
        if len(pool) == 1:
            return pool[0]
        return self.rng.choice(pool)

    async def _resolve(self, image_id: ImageId) -> Optional[Image]:
        index = await self.repo.load_index()
        entry = index.find(image_id)
        if entry is None or not await self.repo.image_exists(entry.file):
            return None
        return Image.from_entry(entry)


__all__ = ["PlaylistService"]
