"""
Service Logger

Shared logging setup for the frame backend. Every module logs through
``logging.getLogger(__name__)``; the service entrypoint calls
``setup_service_logger`` once to attach handlers to the root logger.
"""

import logging
from typing import Optional

from core.config import LoggingConfig

_configured = False


def setup_service_logger(
    service_name: str,
    level: Optional[str] = None,
    config: Optional[LoggingConfig] = None,
) -> logging.Logger:
    """
    Configure root logging for a service and return the service logger.

    Args:
        service_name: Logger name for the service (e.g. "frame_service")
        level: Optional level override ("DEBUG", "INFO", ...)
        config: Logging configuration (loaded from env if not provided)

    Returns:
        Configured service logger
    """
    global _configured

    config = config or LoggingConfig.from_env()
    log_level = getattr(logging, (level or config.log_level).upper(), logging.INFO)

    root = logging.getLogger()
    if not _configured:
        formatter = logging.Formatter(config.log_format)

        if config.enable_console:
            console = logging.StreamHandler()
            console.setFormatter(formatter)
            root.addHandler(console)

        if config.log_file:
            file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            root.addHandler(file_handler)

        _configured = True

    root.setLevel(log_level)

    logger = logging.getLogger(service_name)
    logger.setLevel(log_level)
    return logger


__all__ = ["setup_service_logger"]
