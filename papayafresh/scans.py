"""
Recording of new scans submitted by the mobile app.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from papayafresh.store import (
    HISTORY_SUBCOLLECTION,
    SCANS_COLLECTION,
    SHELF_SUBCOLLECTION,
    DocumentStore,
)
from papayafresh.timestamps import utc_now

logger = logging.getLogger(__name__)


@dataclass
class RecordedScan:
    shelf_id: str
    history_id: str
    global_scan_id: str


class ScanRecorder:
    def __init__(self, store: DocumentStore):
        self.store = store

    def record(
        self,
        user_id: str,
        scan: Dict[str, Any],
        now: Optional[datetime] = None,
    ) -> RecordedScan:
        """Write one scan to the user's shelf and history and to the global log."""
        document = dict(scan)
        document["userId"] = user_id
        document.setdefault("scannedDate", now or utc_now())

        shelf_id = self.store.add_user_record(user_id, SHELF_SUBCOLLECTION, document)
        history_id = self.store.add_user_record(
            user_id, HISTORY_SUBCOLLECTION, document
        )
        global_scan_id = self.store.add_record(SCANS_COLLECTION, document)
        logger.info(
            "Recorded scan for %s (shelf=%s, history=%s, scans=%s)",
            user_id,
            shelf_id,
            history_id,
            global_scan_id,
        )
        return RecordedScan(
            shelf_id=shelf_id, history_id=history_id, global_scan_id=global_scan_id
        )
