"""
Canvas Client for Frame Service

HTTP client for the e-ink frame's local API. The frame exposes a single
``/upstream/pull_settings`` endpoint that turns upstream pulling on or off.
"""

import logging
from datetime import datetime
from typing import Any, Dict

import httpx

from core.service_client_base import BaseDeviceClient

from ..primitives import CanvasDate, CanvasUrl, ServerUrl
from ..protocols import DeviceCommandError

logger = logging.getLogger(__name__)


class CanvasClient(BaseDeviceClient):
    """Client for the frame's pull-settings API"""

    device_name = "canvas"

    async def wake_up(self, canvas_url: CanvasUrl, server_url: ServerUrl, cron_time: datetime) -> None:
        """
        Enable upstream pulling so the frame starts calling ``/eink_pull``

        Args:
            canvas_url: Base URL of the frame
            server_url: Base URL the frame pulls from
            cron_time: First pull instant

        Raises:
            DeviceCommandError: On a non-2xx answer or a transport failure
        """
        await self._configure(canvas_url, {
            "upstream_on": True,
            "upstream_url": str(server_url),
            "token": None,
            "cron_time": str(CanvasDate(cron_time)),
        })
        logger.info(f"Woke canvas at {canvas_url} (upstream {server_url})")

    async def sleep(self, canvas_url: CanvasUrl, server_url: ServerUrl) -> None:
        """Disable upstream pulling"""
        await self._configure(canvas_url, {
            "upstream_on": False,
            "upstream_url": str(server_url),
            "token": None,
        })
        logger.info(f"Put canvas at {canvas_url} to sleep")

    async def _configure(self, canvas_url: str, body: Dict[str, Any]) -> None:
        url = f"{canvas_url}/upstream/pull_settings"
        try:
            response = await self.put(url, json=body)
        except httpx.HTTPError as e:
            logger.error(f"Canvas request to {url} failed: {e}")
            raise DeviceCommandError(str(canvas_url), str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.error(f"Canvas at {canvas_url} answered {response.status_code}: {response.text}")
            raise DeviceCommandError(str(canvas_url), f"{response.status_code} {response.text}")


__all__ = ["CanvasClient"]
