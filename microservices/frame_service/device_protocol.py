"""
Device protocol adapter

Translates engine outcomes into the envelopes the frame's pull client
understands. The frame reads ``data.next_cron_time`` to schedule its next
pull; a null value stops scheduled pulling.
"""

from datetime import datetime

from .models import (
    CanvasEnvelope,
    CanvasScheduleData,
    CanvasShowData,
    Image,
    ImageNotFound,
    IndexEmpty,
    NextImage,
    PlaylistEmpty,
    PlaylistNotFound,
    PlaylistStopped,
)
from .primitives import CanvasDate
from .schedule import retry_time


def show(image: Image, next_cron_time: datetime, origin: str) -> CanvasEnvelope:
    return CanvasEnvelope(
        status=200,
        type="SHOW",
        message="Image retrieved successfully",
        data=CanvasShowData(
            next_cron_time=CanvasDate(next_cron_time),
            image_url=f"{origin.rstrip('/')}{image.url}",
        ),
    )


def image_unavailable(next_cron_time: datetime) -> CanvasEnvelope:
    return CanvasEnvelope(
        status=204,
        message="No image available",
        data=CanvasScheduleData(next_cron_time=CanvasDate(next_cron_time)),
    )


def stop_pulling() -> CanvasEnvelope:
    return CanvasEnvelope(
        status=200,
        message="Stopping scheduled pull",
        data=CanvasScheduleData(next_cron_time=None),
    )


def from_outcome(outcome, origin: str, now: datetime, retry_minutes: int = 5) -> CanvasEnvelope:
    """
    Map an engine outcome to its envelope.

    Args:
        outcome: A NextImageOutcome or SettingsPullOutcome
        origin: Base URL prefixed to the image path
        now: Current instant (used for the image-not-found retry)
        retry_minutes: Delay before the frame retries after a missing image

    Raises:
        TypeError: For an outcome type this adapter does not know
    """
    if isinstance(outcome, NextImage):
        return show(outcome.next_image, outcome.displayed_at, origin)
    if isinstance(outcome, ImageNotFound):
        return image_unavailable(retry_time(now, retry_minutes))
    if isinstance(outcome, IndexEmpty):
        return image_unavailable(outcome.next_cron_time)
    if isinstance(outcome, (PlaylistNotFound, PlaylistStopped, PlaylistEmpty)):
        return stop_pulling()
    raise TypeError(f"Unhandled pull outcome: {type(outcome).__name__}")


__all__ = ["show", "image_unavailable", "stop_pulling", "from_outcome"]
