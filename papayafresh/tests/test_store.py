import unittest
from unittest.mock import MagicMock

from datetime import datetime, timezone

from google.api_core import exceptions as google_exceptions
from google.cloud.firestore_v1 import DocumentReference, GeoPoint

from papayafresh.errors import UpstreamFailure
from papayafresh.store import (
    FirestoreDocumentStore,
    InMemoryDocumentStore,
    StoredRecord,
    to_jsonable,
)


def _snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data
    return snapshot


class FirestoreDocumentStoreTests(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.store = FirestoreDocumentStore(self.client)

    def test_list_users(self):
        self.client.collection.return_value.stream.return_value = [
            _snapshot("a", {"email": "a@example.com"}),
            _snapshot("b", None),
        ]

        users = self.store.list_users()

        self.client.collection.assert_called_with("users")
        self.assertEqual([u.id for u in users], ["a", "b"])
        self.assertEqual(users[0].data, {"email": "a@example.com"})
        self.assertEqual(users[1].data, {})

    def test_get_user_missing(self):
        user_ref = self.client.collection.return_value.document.return_value
        user_ref.get.return_value = _snapshot("x", None, exists=False)

        self.assertIsNone(self.store.get_user("x"))
        self.client.collection.return_value.document.assert_called_with("x")

    def test_list_user_records_reads_subcollection(self):
        user_ref = self.client.collection.return_value.document.return_value
        user_ref.collection.return_value.stream.return_value = [
            _snapshot("s1", {"ripeness": "Ripe", "extra": [1, 2]}),
        ]

        records = self.store.list_user_records("uid", "shelf")

        user_ref.collection.assert_called_with("shelf")
        self.assertEqual(records[0].as_dict(), {"id": "s1", "ripeness": "Ripe", "extra": [1, 2]})

    def test_delete_user_record(self):
        user_ref = self.client.collection.return_value.document.return_value
        self.store.delete_user_record("uid", "history", "h1")
        user_ref.collection.assert_called_with("history")
        user_ref.collection.return_value.document.assert_called_with("h1")
        user_ref.collection.return_value.document.return_value.delete.assert_called_once()

    def test_add_returns_new_ids(self):
        user_ref = self.client.collection.return_value.document.return_value
        user_ref.collection.return_value.add.return_value = (None, MagicMock(id="new-shelf"))
        self.client.collection.return_value.add.return_value = (None, MagicMock(id="new-scan"))

        self.assertEqual(self.store.add_user_record("uid", "shelf", {"a": 1}), "new-shelf")
        self.assertEqual(self.store.add_record("scans", {"a": 1}), "new-scan")

    def test_api_errors_become_upstream_failures(self):
        self.client.collection.return_value.stream.side_effect = (
            google_exceptions.ServiceUnavailable("firestore down")
        )
        with self.assertRaises(UpstreamFailure) as ctx:
            self.store.list_users()
        self.assertIsInstance(ctx.exception.__cause__, google_exceptions.ServiceUnavailable)


class InMemoryDocumentStoreTests(unittest.TestCase):
    def test_records_are_isolated_per_user_and_subcollection(self):
        store = InMemoryDocumentStore()
        store.add_user("a")
        record_id = store.add_user_record("a", "shelf", {"ripeness": "Ripe"})
        store.add_user_record("a", "history", {"ripeness": "Ripe"})
        store.add_user_record("b", "shelf", {"ripeness": "Green"})

        self.assertEqual([r.id for r in store.list_user_records("a", "shelf")], [record_id])

        store.delete_user_record("a", "shelf", record_id)
        self.assertEqual(store.list_user_records("a", "shelf"), [])
        self.assertEqual(len(store.list_user_records("a", "history")), 1)
        self.assertEqual(len(store.list_user_records("b", "shelf")), 1)

    def test_returned_data_is_a_copy(self):
        store = InMemoryDocumentStore()
        store.add_user("a", {"email": "a@example.com"})
        store.get_user("a").data["email"] = "changed"
        self.assertEqual(store.get_user("a").data["email"], "a@example.com")



class ToJsonableTests(unittest.TestCase):
    def test_firestore_types(self):
        value = {
            "at": datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            "where": GeoPoint(-33.5, 151.25),
            "ref": DocumentReference("users", "u1"),
            "nested": [{"where": GeoPoint(0.0, 0.0)}],
        }
        self.assertEqual(
            to_jsonable(value),
            {
                "at": "2026-01-02T03:04:05+00:00",
                "where": {"latitude": -33.5, "longitude": 151.25},
                "ref": "users/u1",
                "nested": [{"where": {"latitude": 0.0, "longitude": 0.0}}],
            },
        )

    def test_record_as_json_keeps_id_and_plain_fields(self):
        record = StoredRecord(id="r1", data={"ripeness": "Ripe", "count": 2})
        self.assertEqual(record.as_json(), {"id": "r1", "ripeness": "Ripe", "count": 2})

if __name__ == "__main__":
    unittest.main()
