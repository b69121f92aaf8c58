"""
Frame Service

Backend for a networked e-ink photo frame providing:
- Photo uploads and a durable photo index
- Playlist rotation without repeats within a cycle
- Quiet-hours aware pull scheduling
- The frame's pull / signal protocol and battery reporting

Port: 3000
"""

__version__ = "1.0.0"
__service__ = "frame_service"
