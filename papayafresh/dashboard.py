"""
Aggregation of per-user shelf and history subcollections into admin stats.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from papayafresh.stats import ripeness_distribution, weekly_scans
from papayafresh.store import (
    HISTORY_SUBCOLLECTION,
    SHELF_SUBCOLLECTION,
    DocumentStore,
    StoredRecord,
    to_jsonable,
)
from papayafresh.timestamps import format_time_ago, to_datetime, utc_now

logger = logging.getLogger(__name__)

MAX_RECENT_ACTIVITY = 6
USER_ID_PREVIEW_LENGTH = 8

NO_ACTIVITY_ENTRY = {
    "user": "No activity",
    "action": "No scans yet",
    "time": "-",
}

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass
class ActivityEntry:
    user: str
    action: str
    time: str
    scanned_at: Optional[datetime] = None

    def as_dict(self) -> dict:
        return {"user": self.user, "action": self.action, "time": self.time}


@dataclass
class DashboardSummary:
    total_users: int = 0
    total_scans: int = 0
    total_shelf_items: int = 0
    total_history_items: int = 0
    active_users: int = 0
    ripeness_distribution: Dict[str, int] = field(default_factory=dict)
    weekly_scans: List[int] = field(default_factory=list)
    recent_activity: List[dict] = field(default_factory=list)

    @property
    def average_scans_per_user(self) -> float:
        if not self.total_users:
            return 0
        return round(self.total_scans / self.total_users, 1)

    def as_dict(self) -> dict:
        return {
            "totalUsers": self.total_users,
            "totalScans": self.total_scans,
            "papayasOnShelf": self.total_shelf_items,
            "ripenessDistribution": self.ripeness_distribution,
            "weeklyScans": self.weekly_scans,
            "recentActivity": self.recent_activity,
            "userStats": {
                "averageScansPerUser": self.average_scans_per_user,
                "activeUsers": self.active_users,
                "totalShelfItems": self.total_shelf_items,
                "totalHistoryItems": self.total_history_items,
            },
        }


def user_label(user: StoredRecord) -> str:
    """Email if the user has one, otherwise a shortened uid."""
    email = user.data.get("email")
    if email:
        return str(email)
    if len(user.id) <= USER_ID_PREVIEW_LENGTH:
        return user.id
    return f"{user.id[:USER_ID_PREVIEW_LENGTH]}..."


def scan_time(record: Dict[str, Any], fallback: datetime) -> Any:
    return record.get("scannedDate") or record.get("addedAt") or fallback


def activity_for(
    user: StoredRecord, record: Dict[str, Any], when: Any, now: datetime
) -> ActivityEntry:
    label = record.get("ripeness") or record.get("variety") or "Unknown"
    return ActivityEntry(
        user=user_label(user),
        action=f"Scanned Papaya - {label}",
        time=format_time_ago(when, now=now),
        scanned_at=to_datetime(when),
    )


def most_recent(activities: List[ActivityEntry], limit: int) -> List[ActivityEntry]:
    """Newest first; entries without a readable scan time go last."""
    ordered = sorted(
        activities,
        key=lambda entry: entry.scanned_at or _OLDEST,
        reverse=True,
    )
    return ordered[:limit]


class DashboardAggregator:
    """Reads every user's shelf and history and folds them into dashboard stats."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def list_users(self) -> List[dict]:
        users = []
        for user in self.store.list_users():
            shelf_count = len(
                self.store.list_user_records(user.id, SHELF_SUBCOLLECTION)
            )
            history_count = len(
                self.store.list_user_records(user.id, HISTORY_SUBCOLLECTION)
            )
            users.append(
                {
                    "userId": user.id,
                    "email": str(user.data.get("email") or "No email"),
                    "user_id": str(user.data.get("user_id") or "No user_id"),
                    "created_at": to_jsonable(
                        user.data.get("created_at") or "Unknown"
                    ),
                    "shelfCount": shelf_count,
                    "historyCount": history_count,
                    "totalScans": shelf_count + history_count,
                }
            )
        logger.info("Listed %d users with scan counts", len(users))
        return users

    def summarize(self, now: Optional[datetime] = None) -> DashboardSummary:
        now = now or utc_now()
        users = self.store.list_users()
        summary = DashboardSummary(total_users=len(users))
        all_scans: List[dict] = []
        activities: List[ActivityEntry] = []

        for user in users:
            shelf = self.store.list_user_records(user.id, SHELF_SUBCOLLECTION)
            history = self.store.list_user_records(user.id, HISTORY_SUBCOLLECTION)

            for record in shelf:
                when = scan_time(record.data, now)
                all_scans.append(
                    {
                        "userId": user.id,
                        "userEmail": user.data.get("email"),
                        **record.data,
                        "scanned_at": when,
                    }
                )
                activities.append(activity_for(user, record.data, when, now))

            if shelf:
                summary.active_users += 1
            summary.total_shelf_items += len(shelf)
            summary.total_history_items += len(history)
            summary.total_scans += len(shelf) + len(history)

        summary.ripeness_distribution = ripeness_distribution(all_scans)
        summary.weekly_scans = weekly_scans(all_scans, now=now)
        recent = most_recent(activities, MAX_RECENT_ACTIVITY)
        summary.recent_activity = [entry.as_dict() for entry in recent] or [
            dict(NO_ACTIVITY_ENTRY)
        ]
        logger.info(
            "Dashboard stats: %d users, %d scans, %d on shelf",
            summary.total_users,
            summary.total_scans,
            summary.total_shelf_items,
        )
        return summary
