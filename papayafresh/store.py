"""
Document store abstraction for Cloud Firestore and an in-memory test implementation.

Layout:
    users/{userId}                  user root document
    users/{userId}/shelf/{id}       items currently on the user's shelf
    users/{userId}/history/{id}     the user's scan log
    scans/{id}                      global log of every recorded scan
"""

from __future__ import annotations

import copy
import logging
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Optional, Protocol

from fastapi.encoders import jsonable_encoder
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import DocumentReference, GeoPoint

from papayafresh.errors import UpstreamFailure

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"
SHELF_SUBCOLLECTION = "shelf"
HISTORY_SUBCOLLECTION = "history"
SCANS_COLLECTION = "scans"

USER_SUBCOLLECTIONS = (SHELF_SUBCOLLECTION, HISTORY_SUBCOLLECTION)

FIRESTORE_ENCODERS = {
    GeoPoint: lambda point: {"latitude": point.latitude, "longitude": point.longitude},
    DocumentReference: lambda ref: ref.path,
}


def to_jsonable(value: Any) -> Any:
    """Convert stored field values (timestamps, geopoints, references) for JSON output."""
    return jsonable_encoder(value, custom_encoder=FIRESTORE_ENCODERS)


@dataclass
class StoredRecord:
    """A document id plus its raw field mapping, unknown fields included."""

    id: str
    data: Dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict:
        return {"id": self.id, **self.data}

    def as_json(self) -> dict:
        """`as_dict` with Firestore-native values converted to JSON types."""
        return to_jsonable(self.as_dict())


class DocumentStore(Protocol):
    """Operations the services need from the document database."""

    def list_users(self) -> list[StoredRecord]:
        ...

    def get_user(self, user_id: str) -> Optional[StoredRecord]:
        ...

    def delete_user(self, user_id: str) -> None:
        ...

    def list_user_records(self, user_id: str, subcollection: str) -> list[StoredRecord]:
        ...

    def add_user_record(self, user_id: str, subcollection: str, data: dict) -> str:
        ...

    def delete_user_record(
        self, user_id: str, subcollection: str, record_id: str
    ) -> None:
        ...

    def add_record(self, collection: str, data: dict) -> str:
        ...


class InMemoryDocumentStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self):
        self.users: Dict[str, dict] = {}
        self.user_records: Dict[tuple[str, str], Dict[str, dict]] = {}
        self.collections: Dict[str, Dict[str, dict]] = {}

    def add_user(self, user_id: str, data: Optional[dict] = None) -> None:
        self.users[user_id] = dict(data or {})

    def list_users(self) -> list[StoredRecord]:
        return [
            StoredRecord(id=user_id, data=copy.deepcopy(data))
            for user_id, data in self.users.items()
        ]

    def get_user(self, user_id: str) -> Optional[StoredRecord]:
        data = self.users.get(user_id)
        if data is None:
            return None
        return StoredRecord(id=user_id, data=copy.deepcopy(data))

    def delete_user(self, user_id: str) -> None:
        self.users.pop(user_id, None)

    def list_user_records(self, user_id: str, subcollection: str) -> list[StoredRecord]:
        records = self.user_records.get((user_id, subcollection), {})
        return [
            StoredRecord(id=record_id, data=copy.deepcopy(data))
            for record_id, data in records.items()
        ]

    def add_user_record(self, user_id: str, subcollection: str, data: dict) -> str:
        record_id = uuid.uuid4().hex
        self.user_records.setdefault((user_id, subcollection), {})[record_id] = dict(
            data
        )
        return record_id

    def delete_user_record(
        self, user_id: str, subcollection: str, record_id: str
    ) -> None:
        records = self.user_records.get((user_id, subcollection))
        if records is None:
            return
        records.pop(record_id, None)
        if not records:
            del self.user_records[(user_id, subcollection)]

    def add_record(self, collection: str, data: dict) -> str:
        record_id = uuid.uuid4().hex
        self.collections.setdefault(collection, {})[record_id] = dict(data)
        return record_id


@contextmanager
def _upstream(operation: str) -> Iterator[None]:
    try:
        yield
    except google_exceptions.GoogleAPICallError as e:
        logger.error("Firestore %s failed: %s", operation, e)
        raise UpstreamFailure(f"Firestore {operation} failed: {e}") from e


class FirestoreDocumentStore:
    """
    Cloud Firestore implementation backed by a `google.cloud.firestore.Client`
    (as returned by `firebase_admin.firestore.client()`).
    """

    def __init__(self, client):
        self._client = client

    def _user_ref(self, user_id: str):
        return self._client.collection(USERS_COLLECTION).document(user_id)

    def list_users(self) -> list[StoredRecord]:
        with _upstream("list users"):
            return [
                StoredRecord(id=doc.id, data=doc.to_dict() or {})
                for doc in self._client.collection(USERS_COLLECTION).stream()
            ]

    def get_user(self, user_id: str) -> Optional[StoredRecord]:
        with _upstream("get user"):
            snapshot = self._user_ref(user_id).get()
        if not snapshot.exists:
            return None
        return StoredRecord(id=snapshot.id, data=snapshot.to_dict() or {})

    def delete_user(self, user_id: str) -> None:
        with _upstream("delete user"):
            self._user_ref(user_id).delete()

    def list_user_records(self, user_id: str, subcollection: str) -> list[StoredRecord]:
        with _upstream(f"list {subcollection}"):
            return [
                StoredRecord(id=doc.id, data=doc.to_dict() or {})
                for doc in self._user_ref(user_id).collection(subcollection).stream()
            ]

    def add_user_record(self, user_id: str, subcollection: str, data: dict) -> str:
        with _upstream(f"add {subcollection} record"):
            _, doc_ref = self._user_ref(user_id).collection(subcollection).add(data)
        return doc_ref.id

    def delete_user_record(
        self, user_id: str, subcollection: str, record_id: str
    ) -> None:
        with _upstream(f"delete {subcollection} record"):
            self._user_ref(user_id).collection(subcollection).document(
                record_id
            ).delete()

    def add_record(self, collection: str, data: dict) -> str:
        with _upstream(f"add {collection} record"):
            _, doc_ref = self._client.collection(collection).add(data)
        return doc_ref.id
