"""
Frame Service Main Application

Backend for a networked e-ink photo frame. The frame pulls its next image
from ``/eink_pull``; phones upload photos to ``/upload``.

Port: 3000
"""

import logging
import os
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.config import FrameServiceConfig, get_settings
from core.logger import setup_service_logger

from . import device_protocol
from .factory import FrameServiceFactory
from .frame_service import FrameService
from .models import (
    HealthResponse,
    PlaylistEmpty,
    PlaylistNotFound,
    PlaylistStatus,
    StartPlaylistRequest,
)
from .playlist_service import PlaylistService
from .primitives import CanvasUrl, Hour, InvalidValueError, PlaylistId, ServerUrl
from .protocols import DeviceCommandError, FrameServiceError, ImageFileNotFoundError
from .routes_registry import SERVICE_METADATA, list_endpoints

SERVICE_NAME = SERVICE_METADATA["service_name"]
SERVICE_VERSION = SERVICE_METADATA["version"]

logger = logging.getLogger(__name__)

IMAGE_CACHE_CONTROL = "public, max-age=31536000, immutable"

# Global factory instance
factory: Optional[FrameServiceFactory] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    global factory

    config = get_settings()
    setup_service_logger(SERVICE_NAME, config=config.logging)
    logger.info(f"Starting {SERVICE_NAME} on port {config.service_port}")

    factory = FrameServiceFactory(config)
    await factory.initialize()

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")
    await factory.close()
    factory = None


# Create FastAPI application
app = FastAPI(
    title="Frame Service",
    description="Photo rotation backend for a networked e-ink frame",
    version=SERVICE_VERSION,
    lifespan=lifespan,
)


# ====================
# Exception Handlers
# ====================


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": status_code, "message": message, **extra},
    )


@app.exception_handler(InvalidValueError)
async def invalid_value_handler(request: Request, exc: InvalidValueError):
    return _error(status.HTTP_400_BAD_REQUEST, str(exc), error=exc.kind)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if errors:
        first = errors[0]
        location = ".".join(str(part) for part in first.get("loc", ()))
        message = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
    else:
        message = "Invalid request"
    return _error(status.HTTP_400_BAD_REQUEST, message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(ImageFileNotFoundError)
async def image_not_found_handler(request: Request, exc: ImageFileNotFoundError):
    return _error(status.HTTP_404_NOT_FOUND, "Not found")


@app.exception_handler(DeviceCommandError)
async def device_command_handler(request: Request, exc: DeviceCommandError):
    logger.error(f"Device command failed: {exc}")
    return _error(status.HTTP_502_BAD_GATEWAY, str(exc))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# ====================
# Middleware
# ====================


@app.middleware("http")
async def capture_battery(request: Request, call_next):
    """Cache ``?battery=N`` reported by the frame on any request"""
    raw = request.query_params.get("battery")
    if raw and factory is not None:
        try:
            battery = await factory.frame_service.record_battery(raw)
            logger.debug(f"Battery reported: {battery.percentage}%")
        except InvalidValueError as e:
            logger.warning(f"Ignoring battery report {raw!r}: {e}")
        except FrameServiceError as e:
            logger.error(f"Could not store battery report: {e}")
    return await call_next(request)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)")
    return response


# ====================
# Dependencies
# ====================


def get_factory() -> FrameServiceFactory:
    if factory is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return factory


def get_config(f: FrameServiceFactory = Depends(get_factory)) -> FrameServiceConfig:
    return f.config


def get_frame_service(f: FrameServiceFactory = Depends(get_factory)) -> FrameService:
    return f.frame_service


def get_playlist_service(f: FrameServiceFactory = Depends(get_factory)) -> PlaylistService:
    return f.playlist_service


def _origin(request: Request, config: FrameServiceConfig) -> str:
    """Base URL the frame should use to reach this server"""
    return config.server_url or str(request.base_url).rstrip("/")


# ====================
# Health & Descriptor
# ====================


@app.get("/")
async def root():
    """Service descriptor"""
    return {
        "status": 200,
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "endpoints": list_endpoints(),
    }


@app.get("/health", response_model=HealthResponse)
async def health_check(config: FrameServiceConfig = Depends(get_config)):
    """Health check endpoint"""
    writable = os.access(config.data_dir, os.W_OK)
    health = HealthResponse(
        status="healthy" if writable else "unhealthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        port=config.service_port,
        dependencies={
            "data_dir": "writable" if writable else "unavailable",
            "canvas": "configured" if config.canvas_url else "not_configured",
        },
    )
    return JSONResponse(content=health.model_dump(), status_code=200 if writable else 503)


# ====================
# Device Protocol
# ====================


@app.get("/eink_pull")
async def eink_pull(
    request: Request,
    config: FrameServiceConfig = Depends(get_config),
    frame_service: FrameService = Depends(get_frame_service),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    """Next image for the frame, with the time of its next pull"""
    playlist_id = PlaylistId(config.default_playlist_id)
    playlist = await playlist_service.get(playlist_id)

    if playlist is None and config.settings_fallback_enabled:
        outcome = await frame_service.pull_by_settings()
    else:
        outcome = await playlist_service.next_image(playlist_id)

    envelope = device_protocol.from_outcome(
        outcome,
        origin=_origin(request, config),
        now=playlist_service.clock(),
        retry_minutes=config.image_retry_minutes,
    )
    logger.info(f"eink_pull -> {outcome.kind}")
    return envelope.to_wire()


@app.get("/eink_signal")
async def eink_signal(
    request: Request,
    f: FrameServiceFactory = Depends(get_factory),
):
    """Frame feedback; puts the frame to sleep when nothing should rotate"""
    config = f.config
    playlist = await f.playlist_service.get(PlaylistId(config.default_playlist_id))

    if playlist is None:
        should_sleep = not config.settings_fallback_enabled
    else:
        should_sleep = playlist.status == PlaylistStatus.STOP

    if should_sleep and config.canvas_url:
        try:
            await f.canvas_client.sleep(CanvasUrl(config.canvas_url), ServerUrl(_origin(request, config)))
        except DeviceCommandError as e:
            logger.warning(f"Sleep command after signal failed: {e}")

    return {"status": 200, "message": "Feedback recorded"}


@app.get("/canvas/battery")
async def canvas_battery(frame_service: FrameService = Depends(get_frame_service)):
    """Last battery state reported by the frame"""
    battery = await frame_service.get_battery()
    if battery is None:
        return {"status": 200, "data": "battery-unavailable"}
    return {"status": 200, "data": battery.to_json_dict()}


# ====================
# Photos
# ====================


@app.post("/upload")
async def upload(
    request: Request,
    orientation: Optional[str] = Query(None, description="P or L"),
    filename: Optional[str] = Query(None, description="Legacy name such as photo_P.jpg"),
    frame_service: FrameService = Depends(get_frame_service),
):
    """Upload a raw JPEG body"""
    contents = await request.body()
    result = await frame_service.upload(contents, orientation=orientation, filename=filename)
    return {"status": 200, "data": result.model_dump(mode="json")}


@app.delete("/images")
@app.delete("/photos")
async def delete_all_photos(frame_service: FrameService = Depends(get_frame_service)):
    """Delete every stored photo and reset the index"""
    deleted = await frame_service.delete_all()
    return {
        "status": 200,
        "message": "All photos deleted",
        "data": {"deletedFiles": deleted},
    }


@app.get("/images/{name}")
async def get_image(name: str, frame_service: FrameService = Depends(get_frame_service)):
    """Stored image bytes by id or file name"""
    _, contents = await frame_service.read_image(name)
    return Response(
        content=contents,
        media_type="image/jpeg",
        headers={"Cache-Control": IMAGE_CACHE_CONTROL},
    )


# ====================
# Settings
# ====================


@app.get("/settings")
async def get_rotation_settings(frame_service: FrameService = Depends(get_frame_service)):
    settings = await frame_service.get_settings()
    return {"status": 200, "data": settings.to_json_dict()}


@app.put("/settings")
async def update_rotation_settings(
    request: Request,
    frame_service: FrameService = Depends(get_frame_service),
):
    """Partial update of intervalHours / shuffle"""
    try:
        body = await request.json()
    except ValueError:
        raise InvalidValueError("Invalid body") from None

    settings = await frame_service.update_settings(body)
    return {"status": 200, "data": settings.to_json_dict()}


# ====================
# Playlist
# ====================


async def _start_playlist(
    playlist_service: PlaylistService,
    config: FrameServiceConfig,
    server_url: ServerUrl,
    canvas_url: CanvasUrl,
    cron_interval_in_hours: Hour,
    quiet_hours=None,
):
    playlist_id = PlaylistId(config.default_playlist_id)
    outcome = await playlist_service.start(
        server_url,
        canvas_url,
        cron_interval_in_hours,
        playlist_id,
        quiet_hours=quiet_hours,
    )
    if isinstance(outcome, PlaylistEmpty):
        raise HTTPException(status_code=400, detail="Playlist must have at least one image")

    return {
        "status": 200,
        "message": f"Playlist {outcome.playlist_id} started",
        "data": {"playlistId": outcome.playlist_id},
    }


@app.post("/playlist/start")
async def start_playlist(
    body: StartPlaylistRequest,
    request: Request,
    config: FrameServiceConfig = Depends(get_config),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    """Start the default playlist for the given frame"""
    return await _start_playlist(
        playlist_service,
        config,
        ServerUrl(_origin(request, config)),
        body.canvas_url,
        body.cron_interval_in_hours,
        quiet_hours=body.quiet_hours,
    )


@app.get("/playlist/start")
async def start_playlist_from_config(
    request: Request,
    config: FrameServiceConfig = Depends(get_config),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    """Start the default playlist with the configured frame and interval"""
    return await _start_playlist(
        playlist_service,
        config,
        ServerUrl(_origin(request, config)),
        CanvasUrl(config.canvas_url),
        Hour(config.cron_interval_hours),
    )


@app.post("/playlist/stop")
async def stop_playlist(
    request: Request,
    config: FrameServiceConfig = Depends(get_config),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    """Stop the default playlist and put the frame to sleep"""
    outcome = await playlist_service.stop(
        PlaylistId(config.default_playlist_id),
        ServerUrl(_origin(request, config)),
    )
    if isinstance(outcome, PlaylistNotFound):
        raise HTTPException(status_code=404, detail="Playlist not found")
    return {"status": 200, "message": f"Playlist {outcome.playlist_id} stopped"}


@app.get("/playlist")
async def get_playlist(
    config: FrameServiceConfig = Depends(get_config),
    playlist_service: PlaylistService = Depends(get_playlist_service),
):
    """Default playlist record"""
    playlist = await playlist_service.get(PlaylistId(config.default_playlist_id))
    if playlist is None:
        raise HTTPException(status_code=404, detail="Playlist not found")
    return {"status": 200, "data": playlist.to_json_dict()}


# ====================
# Run Server
# ====================

if __name__ == "__main__":
    import uvicorn

    config = get_settings()
    uvicorn.run(
        "microservices.frame_service.main:app",
        host=config.service_host,
        port=config.service_port,
        reload=config.debug,
        log_level=config.logging.log_level.lower(),
    )
