"""
Clients module for frame_service

HTTP clients for commands sent to the physical frame
"""

from .canvas_client import CanvasClient

__all__ = [
    "CanvasClient",
]
