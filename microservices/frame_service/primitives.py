"""
Frame Service Primitives

Validated value types for the frame domain.

Every type here subclasses a builtin (str/int/float) and validates inside
``__new__``, so holding an instance means the value passed its validator.
Pydantic models use these types directly as field types; a failed check
surfaces as a pydantic ``ValidationError`` there, or as the specific
``InvalidValueError`` subclass when called directly.
"""

import math
import re
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Tuple
from urllib.parse import urlparse
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_core import core_schema


# =============================================================================
# Validation Errors
# =============================================================================


class InvalidValueError(ValueError):
    """Base class for primitive validation failures"""

    kind = "invalid_value"

    def __init__(self, message: str, value: Any = None):
        self.value = value
        super().__init__(message)


class InvalidHourError(InvalidValueError):
    kind = "invalid_hour"


class InvalidUrlError(InvalidValueError):
    kind = "invalid_url"


class InvalidIdError(InvalidValueError):
    kind = "invalid_id"


class InvalidPercentageError(InvalidValueError):
    kind = "invalid_percentage"


class InvalidOrientationError(InvalidValueError):
    kind = "invalid_orientation"


class InvalidTimezoneError(InvalidValueError):
    kind = "invalid_timezone"


class InvalidDateError(InvalidValueError):
    kind = "invalid_date"


class InvalidFilenameError(InvalidValueError):
    """Raised for unusable upload / image file names.

    ``kind`` is one of ``invalid_filename``, ``invalid_extension`` or
    ``invalid_orientation``.
    """

    def __init__(self, message: str, value: Any = None, kind: str = "invalid_filename"):
        self.kind = kind
        super().__init__(message, value)


# =============================================================================
# Pydantic integration
# =============================================================================


def _primitive_schema(
    cls: type,
    base_schema: core_schema.CoreSchema,
    to_builtin: Callable[[Any], Any],
) -> core_schema.CoreSchema:
    return core_schema.no_info_after_validator_function(
        cls,
        base_schema,
        serialization=core_schema.plain_serializer_function_ser_schema(
            to_builtin, return_schema=base_schema
        ),
    )


class _StrPrimitive(str):
    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return _primitive_schema(cls, core_schema.str_schema(), str)


class _IntPrimitive(int):
    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return _primitive_schema(cls, core_schema.int_schema(), int)


class _FloatPrimitive(float):
    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return _primitive_schema(cls, core_schema.float_schema(), float)


def _to_number(value: Any, error: type, name: str) -> float:
    if isinstance(value, bool) or value is None:
        raise error(f"{name} must be a number, received: {value!r}", value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            raise error(f"{name} must be a number, received: {value!r}", value) from None
    raise error(f"{name} must be a number, received: {value!r}", value)


def _to_integral(value: Any, error: type, name: str) -> int:
    number = _to_number(value, error, name)
    if not math.isfinite(number) or number != int(number):
        raise error(f"{name} must be a whole number, received: {value!r}", value)
    return int(number)


# =============================================================================
# Numbers
# =============================================================================


# One year; longer intervals overflow datetime arithmetic
MAX_INTERVAL_HOURS = 8760


class Hour(_FloatPrimitive):
    """A positive number of hours, at most MAX_INTERVAL_HOURS (cron interval)"""

    def __new__(cls, value: Any = None):
        number = _to_number(value, InvalidHourError, "Hour")
        if not math.isfinite(number) or number <= 0:
            raise InvalidHourError(f"Hour must be a positive number, received: {value!r}", value)
        if number > MAX_INTERVAL_HOURS:
            raise InvalidHourError(f"Hour must be at most {MAX_INTERVAL_HOURS}, received: {value!r}", value)
        return super().__new__(cls, number)


class QuietHour(_IntPrimitive):
    """A local wall-clock hour boundary, 0-23"""

    def __new__(cls, value: Any = None):
        hour = _to_integral(value, InvalidHourError, "QuietHour")
        if not 0 <= hour <= 23:
            raise InvalidHourError(f"QuietHour must be between 0 and 23, received: {value!r}", value)
        return super().__new__(cls, hour)


class BatteryPercentage(_IntPrimitive):
    """Battery charge reported by the device, 0-100"""

    def __new__(cls, value: Any = None):
        percentage = _to_integral(value, InvalidPercentageError, "BatteryPercentage")
        if not 0 <= percentage <= 100:
            raise InvalidPercentageError(
                f"BatteryPercentage must be between 0 and 100, received: {value!r}", value
            )
        return super().__new__(cls, percentage)


# =============================================================================
# URLs
# =============================================================================


class _AbsoluteUrl(_StrPrimitive):
    def __new__(cls, value: Any = None):
        if not isinstance(value, str) or not value.strip():
            raise InvalidUrlError(f"{cls.__name__} must be a non-empty string, received: {value!r}", value)
        parsed = urlparse(value.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise InvalidUrlError(f"{cls.__name__} must be an http(s) URL, received: {value!r}", value)
        return super().__new__(cls, value.strip().rstrip("/"))


class CanvasUrl(_AbsoluteUrl):
    """Base URL of the physical frame's local API"""


class ServerUrl(_AbsoluteUrl):
    """Base URL the frame uses to reach this server"""


class ImageUrl(_StrPrimitive):
    """Server-relative path of a stored image, e.g. ``/images/<file>``"""

    def __new__(cls, value: Any = None):
        if not isinstance(value, str) or not value:
            raise InvalidUrlError(f"ImageUrl must be a string, received: {value!r}", value)
        if not value.startswith("/"):
            raise InvalidUrlError(f"ImageUrl must start with /, received: {value!r}", value)
        return super().__new__(cls, value)


# =============================================================================
# Identifiers
# =============================================================================

_UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)


class _UuidId(_StrPrimitive):
    def __new__(cls, value: Any = None):
        if not isinstance(value, str):
            raise InvalidIdError(f"{cls.__name__} must be a string, received: {value!r}", value)
        if not _UUID_PATTERN.match(value):
            raise InvalidIdError(f"{cls.__name__} must be a uuid, received: {value!r}", value)
        return super().__new__(cls, value)

    @classmethod
    def random(cls):
        return cls(str(uuid.uuid4()))

    @classmethod
    def is_valid(cls, value: Any) -> bool:
        return isinstance(value, str) and bool(_UUID_PATTERN.match(value))


class ImageId(_UuidId):
    """Identifier of a stored image (stem of its ``<id>.jpg`` file)"""


class PlaylistId(_UuidId):
    """Identifier of a playlist record"""


# =============================================================================
# Time
# =============================================================================


class Timezone(_StrPrimitive):
    """An IANA timezone name known to the zone database"""

    def __new__(cls, value: Any = None):
        if not isinstance(value, str) or not value:
            raise InvalidTimezoneError(f"Timezone must be a string, received: {value!r}", value)
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError):
            raise InvalidTimezoneError(f"Unknown timezone: {value!r}", value) from None
        return super().__new__(cls, value)

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(str(self))


_CANVAS_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z$")


class CanvasDate(_StrPrimitive):
    """ISO-8601 UTC timestamp truncated to whole seconds (``...T09:00:00Z``)"""

    def __new__(cls, value: Any = None):
        if isinstance(value, datetime):
            if value.tzinfo is None:
                raise InvalidDateError(f"CanvasDate requires a timezone-aware datetime, received: {value!r}", value)
            text = value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
            return super().__new__(cls, text)
        if isinstance(value, str) and _CANVAS_DATE_PATTERN.match(value):
            return super().__new__(cls, value)
        raise InvalidDateError(f"CanvasDate must be a datetime, received: {value!r}", value)


# =============================================================================
# Orientation & file names
# =============================================================================


class Orientation(str, Enum):
    """Image orientation tag"""
    PORTRAIT = "P"
    LANDSCAPE = "L"

    @classmethod
    def parse(cls, value: Any) -> "Orientation":
        if isinstance(value, cls):
            return value
        if value in ("P", "L"):
            return cls(value)
        raise InvalidOrientationError(f"Orientation must be 'P' or 'L', received: {value!r}", value)


_JPEG_EXTENSIONS = (".jpg", ".jpeg")


def _has_unsafe_path(value: str) -> bool:
    return "/" in value or "\\" in value or "\0" in value or value in (".", "..")


def parse_upload_filename(raw: Any) -> Tuple[str, Orientation]:
    """Validate a legacy upload file name such as ``holiday_P.jpg``.

    Returns the file name and the orientation carried by its suffix.
    """
    if not isinstance(raw, str) or not raw or _has_unsafe_path(raw):
        raise InvalidFilenameError("Invalid filename", raw, kind="invalid_filename")

    if not raw.endswith(_JPEG_EXTENSIONS):
        raise InvalidFilenameError("Only .jpg/.jpeg allowed", raw, kind="invalid_extension")

    stem = raw.rsplit(".", 1)[0]
    if stem.endswith("_P"):
        return raw, Orientation.PORTRAIT
    if stem.endswith("_L"):
        return raw, Orientation.LANDSCAPE

    raise InvalidFilenameError("Filename must end with _P.jpg or _L.jpg", raw, kind="invalid_orientation")


def safe_image_name(raw: Any) -> str:
    """Validate a requested image name (no path traversal)"""
    if not isinstance(raw, str) or not raw or _has_unsafe_path(raw):
        raise InvalidFilenameError("Invalid path", raw, kind="invalid_filename")
    return raw


__all__ = [
    "InvalidValueError",
    "InvalidHourError",
    "InvalidUrlError",
    "InvalidIdError",
    "InvalidPercentageError",
    "InvalidOrientationError",
    "InvalidTimezoneError",
    "InvalidDateError",
    "InvalidFilenameError",
    "MAX_INTERVAL_HOURS",
    "Hour",
    "QuietHour",
    "BatteryPercentage",
    "CanvasUrl",
    "ServerUrl",
    "ImageUrl",
    "ImageId",
    "PlaylistId",
    "Timezone",
    "CanvasDate",
    "Orientation",
    "parse_upload_filename",
    "safe_image_name",
]
