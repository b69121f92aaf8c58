#!/usr/bin/env python3
"""
Core Module for the Frame Backend

Shared infrastructure used by the frame service.

COMPONENTS:
    - config/: Environment-driven configuration (service + logging)
    - logger.py: Service logging setup
    - service_client_base.py: Base HTTP client for talking to devices

USAGE:
    from core.config import get_settings
    from core.logger import setup_service_logger

    config = get_settings()
    logger = setup_service_logger("frame_service", level=config.logging.log_level)
"""

__version__ = "1.0.0"
