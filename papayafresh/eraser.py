"""
Removal of a user from Firestore and Firebase Auth.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from papayafresh.errors import IdentityNotFoundError, NotFoundError
from papayafresh.identity import IdentityProvider
from papayafresh.store import (
    HISTORY_SUBCOLLECTION,
    SHELF_SUBCOLLECTION,
    USER_SUBCOLLECTIONS,
    DocumentStore,
)

logger = logging.getLogger(__name__)


@dataclass
class ErasureResult:
    user_id: str
    shelf_deleted: int
    history_deleted: int
    identity_deleted: bool

    def as_dict(self) -> dict:
        return {
            "shelf": self.shelf_deleted,
            "history": self.history_deleted,
            "auth": self.identity_deleted,
        }


class UserEraser:
    """Deletes a user's shelf, history, root document and auth account."""

    def __init__(self, store: DocumentStore, identity: IdentityProvider):
        self.store = store
        self.identity = identity

    def _delete_subcollection(self, user_id: str, subcollection: str) -> int:
        records = self.store.list_user_records(user_id, subcollection)
        for record in records:
            self.store.delete_user_record(user_id, subcollection, record.id)
        return len(records)

    def erase(self, user_id: str) -> ErasureResult:
        """
        Delete everything stored for `user_id`.

        Raises NotFoundError, before deleting anything, if the user document
        does not exist. Steps run in order: shelf, history, user document,
        auth account. Firestore deletions are not transactional, so a failure
        part way through leaves the earlier deletions in place. A missing
        auth account is logged and ignored.
        """
        if self.store.get_user(user_id) is None:
            raise NotFoundError("User not found")

        deleted = {
            name: self._delete_subcollection(user_id, name)
            for name in USER_SUBCOLLECTIONS
        }
        self.store.delete_user(user_id)
        logger.info(
            "Deleted user %s (%d shelf, %d history records)",
            user_id,
            deleted[SHELF_SUBCOLLECTION],
            deleted[HISTORY_SUBCOLLECTION],
        )

        identity_deleted = True
        try:
            self.identity.delete_user(user_id)
        except IdentityNotFoundError as e:
            identity_deleted = False
            logger.info("Auth delete skipped for %s: %s", user_id, e)

        return ErasureResult(
            user_id=user_id,
            shelf_deleted=deleted[SHELF_SUBCOLLECTION],
            history_deleted=deleted[HISTORY_SUBCOLLECTION],
            identity_deleted=identity_deleted,
        )
