"""
Frame Service Factory

Factory for creating frame service components with their real dependencies.
This is the ONLY place that imports I/O-dependent modules (file store,
canvas HTTP client).

Usage:
    factory = FrameServiceFactory(get_settings())
    await factory.initialize()
    service = factory.frame_service
"""

import logging
import random
from typing import Optional

from core.config import FrameServiceConfig

from .frame_service import FrameService
from .playlist_service import PlaylistService
from .protocols import CanvasClientProtocol

logger = logging.getLogger(__name__)


class FrameServiceFactory:
    """Factory for creating frame service components"""

    def __init__(
        self,
        config: FrameServiceConfig,
        canvas_client: Optional[CanvasClientProtocol] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config
        self.rng = rng
        self._canvas_client = canvas_client
        self._repository = None
        self._frame_service: Optional[FrameService] = None
        self._playlist_service: Optional[PlaylistService] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        # Import real implementations here (not at module level)
        from .clients.canvas_client import CanvasClient
        from .frame_repository import AtomicFileStore, FrameRepository

        logger.info(f"Initializing Frame Service components (data dir: {self.config.data_dir})")

        self._repository = FrameRepository(AtomicFileStore(self.config.data_dir))

        if self._canvas_client is None:
            self._canvas_client = CanvasClient(timeout=self.config.canvas_timeout_seconds)

        self._frame_service = FrameService(repository=self._repository, rng=self.rng)
        self._playlist_service = PlaylistService(
            repository=self._repository,
            canvas_client=self._canvas_client,
            rng=self.rng,
        )

        logger.info("Frame Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        if self._canvas_client:
            await self._canvas_client.close()
        logger.info("Frame Service components closed")

    @property
    def repository(self):
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def frame_service(self) -> FrameService:
        if not self._frame_service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._frame_service

    @property
    def playlist_service(self) -> PlaylistService:
        if not self._playlist_service:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._playlist_service

    @property
    def canvas_client(self) -> Optional[CanvasClientProtocol]:
        return self._canvas_client


__all__ = ["FrameServiceFactory"]
