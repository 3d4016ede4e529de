"""
Chart helpers for the admin dashboard: ripeness buckets and weekly scan trend.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from papayafresh.timestamps import to_datetime, utc_now

RipenessBucket = Literal["unripe", "ripe", "overripe"]

RIPENESS_BUCKETS: tuple[RipenessBucket, ...] = ("unripe", "ripe", "overripe")

# Shown instead of an all-zero pie chart when there are no shelf scans.
EMPTY_RIPENESS_DISTRIBUTION: Dict[str, int] = {"unripe": 1, "ripe": 1, "overripe": 1}

# Placeholder trend for an empty dashboard. This is stand-in data the mobile
# admin screen has always rendered, not a computed value.
EMPTY_WEEKLY_SCANS: List[int] = [2, 5, 8, 12]

WEEKS_SHOWN = 4
SECONDS_PER_WEEK = 7 * 24 * 60 * 60


def ripeness_label(record: Mapping[str, Any]) -> str:
    label = record.get("ripeness") or record.get("variety") or ""
    return str(label).lower()


def classify_ripeness(record: Mapping[str, Any]) -> RipenessBucket:
    label = ripeness_label(record)
    if "unripe" in label or label == "green":
        return "unripe"
    if "overripe" in label or label == "rotten":
        return "overripe"
    return "ripe"


def ripeness_distribution(records: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Count records per ripeness bucket.

    An empty input yields EMPTY_RIPENESS_DISTRIBUTION so the chart never
    renders all zeros.
    """
    counts = {bucket: 0 for bucket in RIPENESS_BUCKETS}
    for record in records:
        counts[classify_ripeness(record)] += 1
    if not any(counts.values()):
        return dict(EMPTY_RIPENESS_DISTRIBUTION)
    return counts


def weeks_ago(value: Any, now: datetime) -> Optional[int]:
    """Whole weeks elapsed since `value`, or None if it has no usable time."""
    moment = to_datetime(value)
    if moment is None:
        return None
    return int((now - moment).total_seconds() // SECONDS_PER_WEEK)


def weekly_scans(
    scans: Iterable[Mapping[str, Any]],
    now: Optional[datetime] = None,
    time_field: str = "scanned_at",
) -> List[int]:
    """
    Bucket scans into the last four weeks, oldest first.

    Returns [3 weeks ago, 2 weeks ago, last week, this week]. Scans older than
    that, dated in the future or without a readable time are skipped. Every
    bucket is floored at 1 so the line chart always has a visible point, which
    means a returned 1 may stand for zero scans.
    """
    scans = list(scans)
    if not scans:
        return list(EMPTY_WEEKLY_SCANS)

    now = now or utc_now()
    weeks = [0] * WEEKS_SHOWN
    for scan in scans:
        age = weeks_ago(scan.get(time_field), now)
        if age is None or age < 0 or age >= WEEKS_SHOWN:
            continue
        weeks[WEEKS_SHOWN - 1 - age] += 1
    return [max(1, count) for count in weeks]
