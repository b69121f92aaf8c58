#!/usr/bin/env python3
"""Frame service configuration

Everything the frame backend reads from the environment: where data lives,
how the device reaches this server, and the default rotation parameters.
Built once at process start and handed to the service factory.
"""
import os
from dataclasses import dataclass, field

from .logging_config import LoggingConfig

DEFAULT_PLAYLIST_ID = "8d0fc632-378b-4fac-903c-96b4feb7d1c4"


def _bool(val: str) -> bool:
    return val.lower() == "true"

def _int(val: str, default: int) -> int:
    try:
        return int(val) if val else default
    except ValueError:
        return default

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class FrameServiceConfig:
    """Frame backend settings"""

    # ===========================================
    # Storage
    # ===========================================
    data_dir: str = "data"

    # ===========================================
    # Device / Network
    # ===========================================
    # Base URL the frame uses to reach this server. Empty means "use the
    # origin of the incoming request".
    server_url: str = ""
    # Base URL of the physical frame's local API (wake/sleep commands)
    canvas_url: str = ""
    canvas_timeout_seconds: float = 10.0

    # ===========================================
    # Rotation
    # ===========================================
    cron_interval_hours: float = 2.0
    default_playlist_id: str = DEFAULT_PLAYLIST_ID
    image_retry_minutes: int = 5
    settings_fallback_enabled: bool = True

    # ===========================================
    # HTTP server
    # ===========================================
    service_host: str = "0.0.0.0"
    service_port: int = 3000
    debug: bool = False

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls) -> 'FrameServiceConfig':
        """Load frame service configuration from environment variables"""
        return cls(
            data_dir=os.getenv("DATA_DIR", "data"),

            server_url=os.getenv("SERVER_URL", "").rstrip("/"),
            canvas_url=os.getenv("CANVAS_URL", "").rstrip("/"),
            canvas_timeout_seconds=_float(os.getenv("CANVAS_TIMEOUT_SECONDS", "10"), 10.0),

            cron_interval_hours=_float(os.getenv("CRON_INTERVAL_HOURS", "2"), 2.0),
            default_playlist_id=os.getenv("DEFAULT_PLAYLIST_ID", DEFAULT_PLAYLIST_ID),
            image_retry_minutes=_int(os.getenv("IMAGE_RETRY_MINUTES", "5"), 5),
            settings_fallback_enabled=_bool(os.getenv("SETTINGS_FALLBACK_ENABLED", "true")),

            service_host=os.getenv("FRAME_SERVICE_HOST", "0.0.0.0"),
            service_port=_int(os.getenv("FRAME_SERVICE_PORT", "3000"), 3000),
            debug=_bool(os.getenv("DEBUG", "false")),

            logging=LoggingConfig.from_env(),
        )
