"""
Base Device Client

Base class for HTTP clients that talk to devices on the local network.
Devices are addressed per call (a deployment may point at a different
frame on every playlist start), so the client owns only the transport.
"""

import httpx
import logging
from typing import Optional, Dict, Any
from abc import ABC

logger = logging.getLogger(__name__)


class BaseDeviceClient(ABC):
    """
    Device client base class

    Handles:
    1. HTTP client management
    2. Default headers
    3. Timeout control

    Example:
        class CanvasClient(BaseDeviceClient):
            device_name = "canvas"

            async def wake_up(self, canvas_url: str):
                return await self.put(f"{canvas_url}/upstream/pull_settings", json={...})
    """

    # Subclasses define this
    device_name: str = None  # e.g. "canvas"

    def __init__(
        self,
        timeout: float = 10.0,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the device client

        Args:
            timeout: Request timeout (seconds)
            http_client: Pre-built client (tests inject one with a mock transport)
        """
        if not self.device_name:
            raise ValueError(f"{self.__class__.__name__} must define 'device_name'")

        self.client = http_client or httpx.AsyncClient(
            timeout=timeout,
            headers=self._build_default_headers()
        )

        logger.debug(f"Initialized {self.device_name} client (timeout={timeout}s)")

    def _build_default_headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "User-Agent": f"frame-backend/{self.device_name}"
        }

    async def close(self):
        """Close the HTTP client"""
        await self.client.aclose()
        logger.debug(f"Closed {self.device_name} client")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================
    # HTTP method wrappers
    # ========================================

    async def put(
        self,
        url: str,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> httpx.Response:
        """PUT request"""
        return await self.client.put(url, json=json, headers=headers)


__all__ = ["BaseDeviceClient"]
