"""
Helpers for the timestamp shapes the mobile client leaves in Firestore.

Scan documents carry their scan time in several forms depending on which app
release wrote them:

- a native Firestore timestamp, surfaced by the Python client as a
  ``DatetimeWithNanoseconds`` (a ``datetime`` subclass),
- an ISO-8601 string,
- a serialized timestamp object, ``{"seconds": ...}`` or ``{"_seconds": ...}``,
- a JavaScript epoch value in milliseconds.

``to_datetime`` collapses all of these into an aware UTC ``datetime`` or
``None`` when the value is missing or unusable.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from typing import Any, Optional

logger = logging.getLogger(__name__)

RECENT_LABEL = "Recent"


class TimestampKind(enum.Enum):
    NATIVE = "native"
    ISO_STRING = "iso_string"
    EPOCH_SECONDS = "epoch_seconds"
    EPOCH_MILLIS = "epoch_millis"
    UNKNOWN = "unknown"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def timestamp_kind(value: Any) -> TimestampKind:
    """Classify a raw field value into one of the supported timestamp shapes."""
    if isinstance(value, (datetime, date)):
        return TimestampKind.NATIVE
    if isinstance(value, str):
        return TimestampKind.ISO_STRING
    if isinstance(value, Mapping) and ("seconds" in value or "_seconds" in value):
        return TimestampKind.EPOCH_SECONDS
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return TimestampKind.EPOCH_MILLIS
    return TimestampKind.UNKNOWN


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _parse_iso(value: str) -> Optional[datetime]:
    text = value.strip()
    if not text:
        return None
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return _as_utc(datetime.fromisoformat(text))


def _from_epoch_wrapper(value: Mapping) -> datetime:
    seconds = value.get("seconds", value.get("_seconds"))
    nanos = value.get("nanoseconds", value.get("_nanoseconds")) or 0
    return datetime.fromtimestamp(float(seconds) + float(nanos) / 1e9, tz=timezone.utc)


def to_datetime(value: Any) -> Optional[datetime]:
    """
    Normalize any supported timestamp representation to an aware UTC datetime.

    Returns None for missing, unknown or unparseable values; never raises.
    """
    kind = timestamp_kind(value)
    try:
        if kind is TimestampKind.NATIVE:
            if not isinstance(value, datetime):
                value = datetime.combine(value, time.min)
            return _as_utc(value)
        if kind is TimestampKind.ISO_STRING:
            return _parse_iso(value)
        if kind is TimestampKind.EPOCH_SECONDS:
            return _from_epoch_wrapper(value)
        if kind is TimestampKind.EPOCH_MILLIS:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError) as e:
        logger.debug("Unparseable %s timestamp %r: %s", kind.value, value, e)
    return None


def format_time_ago(value: Any, now: Optional[datetime] = None) -> str:
    """
    Render a timestamp as a coarse relative age ("Just now", "5 mins ago", ...).

    Falls back to "Recent" when the timestamp is absent or cannot be read.
    """
    moment = to_datetime(value)
    if moment is None:
        return RECENT_LABEL
    try:
        now = _as_utc(now) if now else utc_now()
        minutes = int((now - moment).total_seconds() // 60)
    except (TypeError, ValueError, OverflowError) as e:
        logger.debug("Could not compute age of %r: %s", value, e)
        return RECENT_LABEL

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} mins ago"
    if minutes < 1440:
        return f"{minutes // 60} hr ago"
    return f"{minutes // 1440} days ago"
