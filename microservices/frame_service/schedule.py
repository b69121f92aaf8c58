"""
Schedule helpers

Computes when the frame should pull next: a fixed interval from now, pushed
past the end of an optional quiet-hours window evaluated in the window's
local timezone.
"""

from datetime import datetime, time, timedelta, timezone
from typing import Optional

from .models import QuietHours

_ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def next_cron_time(interval_hours: float, now: datetime) -> datetime:
    """Instant ``interval_hours`` after ``now``"""
    return now + timedelta(hours=interval_hours)


def retry_time(now: datetime, minutes: int) -> datetime:
    return now + timedelta(minutes=minutes)


def in_quiet_window(local_hour: int, start: int, end: int) -> bool:
    """Whether ``local_hour`` falls in ``[start, end)``; the window may wrap midnight"""
    if start == end:
        return False
    if start < end:
        return start <= local_hour < end
    return local_hour >= start or local_hour < end


def apply_quiet_hours(candidate: datetime, quiet_hours: Optional[QuietHours]) -> datetime:
    """
    Shift ``candidate`` to the end of the quiet window if it falls inside it.

    The end is built as a local wall-clock time in the window's timezone and
    converted back, so DST transitions inside the window are honored.
    """
    if quiet_hours is None or not quiet_hours.enabled:
        return candidate

    zone = quiet_hours.timezone.zone
    local = candidate.astimezone(zone)
    if not in_quiet_window(local.hour, quiet_hours.start, quiet_hours.end):
        return candidate

    end_date = local.date()
    if local.hour >= quiet_hours.end:
        # wrapping window, candidate before midnight
        end_date += _ONE_DAY

    local_end = datetime.combine(end_date, time(quiet_hours.end), tzinfo=zone)
    return local_end.astimezone(candidate.tzinfo)


__all__ = [
    "utc_now",
    "next_cron_time",
    "retry_time",
    "in_quiet_window",
    "apply_quiet_hours",
]
