#!/usr/bin/env python3
"""Configuration for the frame backend

Configuration hierarchy:
- service_config: storage location, device endpoints, rotation defaults
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .service_config import DEFAULT_PLAYLIST_ID, FrameServiceConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

# Create global settings instance
settings = FrameServiceConfig.from_env()

def get_settings() -> FrameServiceConfig:
    """Get global settings instance"""
    return settings

def reload_settings() -> FrameServiceConfig:
    """Reload settings from environment"""
    global settings
    settings = FrameServiceConfig.from_env()
    return settings

__all__ = [
    'FrameServiceConfig',
    'LoggingConfig',
    'DEFAULT_PLAYLIST_ID',
    'get_settings',
    'reload_settings',
    'settings',
]
