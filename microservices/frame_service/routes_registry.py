"""
Frame Service Routes Registry

Defines service metadata and the route list served by the index endpoint.
"""

SERVICE_METADATA = {
    "service_name": "frame_service",
    "version": "1.0.0",
    "tags": ["frame", "eink", "playlist"],
    "capabilities": ["eink_pull", "photo_upload", "playlist_rotation", "battery_cache"],
}

ROUTES = [
    {"path": "/", "methods": ["GET"], "description": "Service descriptor"},
    {"path": "/health", "methods": ["GET"], "description": "Health check"},
    # Device protocol
    {"path": "/eink_pull", "methods": ["GET"], "description": "Next image for the frame"},
    {"path": "/eink_signal", "methods": ["GET"], "description": "Frame feedback"},
    {"path": "/canvas/battery", "methods": ["GET"], "description": "Last reported battery state"},
    # Photos
    {"path": "/upload", "methods": ["POST"], "description": "Upload a raw JPEG (?orientation=P|L)"},
    {"path": "/images/{name}", "methods": ["GET"], "description": "Stored image bytes"},
    {"path": "/images", "methods": ["DELETE"], "description": "Delete all photos"},
    {"path": "/photos", "methods": ["DELETE"], "description": "Delete all photos"},
    # Settings
    {"path": "/settings", "methods": ["GET", "PUT"], "description": "Rotation settings"},
    # Playlist
    {"path": "/playlist", "methods": ["GET"], "description": "Default playlist record"},
    {"path": "/playlist/start", "methods": ["GET", "POST"], "description": "Start the default playlist"},
    {"path": "/playlist/stop", "methods": ["POST"], "description": "Stop the default playlist"},
]


def list_endpoints():
    """Flatten ROUTES into ``"METHOD /path"`` strings"""
    return [
        f"{method} {route['path']}"
        for route in ROUTES
        for method in route["methods"]
    ]


__all__ = ["SERVICE_METADATA", "ROUTES", "list_endpoints"]
