import unittest
from unittest.mock import MagicMock

from papayafresh.eraser import UserEraser
from papayafresh.errors import IdentityNotFoundError, NotFoundError, UpstreamFailure
from papayafresh.identity import InMemoryIdentityProvider
from papayafresh.store import InMemoryDocumentStore


class UserEraserTests(unittest.TestCase):
    def setUp(self):
        self.store = InMemoryDocumentStore()
        self.identity = InMemoryIdentityProvider(uids={"uid-1"})
        self.eraser = UserEraser(self.store, self.identity)

        self.store.add_user("uid-1", {"email": "one@example.com"})
        for _ in range(3):
            self.store.add_user_record("uid-1", "shelf", {"ripeness": "Ripe"})
        for _ in range(2):
            self.store.add_user_record("uid-1", "history", {"ripeness": "Ripe"})

    def test_erases_everything(self):
        result = self.eraser.erase("uid-1")

        self.assertEqual(result.shelf_deleted, 3)
        self.assertEqual(result.history_deleted, 2)
        self.assertTrue(result.identity_deleted)
        self.assertIsNone(self.store.get_user("uid-1"))
        self.assertEqual(self.store.list_user_records("uid-1", "shelf"), [])
        self.assertEqual(self.store.list_user_records("uid-1", "history"), [])
        self.assertEqual(self.identity.deleted, ["uid-1"])

    def test_missing_auth_account_still_succeeds(self):
        self.identity.uids.clear()

        result = self.eraser.erase("uid-1")

        self.assertFalse(result.identity_deleted)
        self.assertEqual(result.as_dict(), {"shelf": 3, "history": 2, "auth": False})
        self.assertIsNone(self.store.get_user("uid-1"))

    def test_unknown_user_deletes_nothing(self):
        store = MagicMock()
        store.get_user.return_value = None
        identity = MagicMock()

        with self.assertRaises(NotFoundError):
            UserEraser(store, identity).erase("nobody")

        store.delete_user_record.assert_not_called()
        store.delete_user.assert_not_called()
        identity.delete_user.assert_not_called()

    def test_deletion_order(self):
        store = MagicMock()
        store.get_user.return_value = MagicMock(id="uid-1", data={})
        store.list_user_records.side_effect = lambda uid, name: [MagicMock(id=f"{name}-1")]
        identity = MagicMock()
        identity.delete_user.side_effect = IdentityNotFoundError("gone")
        calls = []
        store.delete_user_record.side_effect = lambda uid, name, rid: calls.append(rid)
        store.delete_user.side_effect = lambda uid: calls.append("user")

        UserEraser(store, identity).erase("uid-1")

        self.assertEqual(calls, ["shelf-1", "history-1", "user"])
        identity.delete_user.assert_called_once_with("uid-1")

    def test_failure_part_way_is_not_rolled_back(self):
        store = MagicMock(wraps=self.store)

        def fail_on_history(uid, name):
            if name == "history":
                raise UpstreamFailure("Firestore list history failed")
            return self.store.list_user_records(uid, name)

        store.list_user_records.side_effect = fail_on_history

        with self.assertRaises(UpstreamFailure):
            UserEraser(store, self.identity).erase("uid-1")

        self.assertEqual(self.store.list_user_records("uid-1", "shelf"), [])
        self.assertEqual(len(self.store.list_user_records("uid-1", "history")), 2)
        self.assertIsNotNone(self.store.get_user("uid-1"))
        self.assertEqual(self.identity.deleted, [])

    def test_other_identity_failures_propagate(self):
        identity = MagicMock()
        identity.delete_user.side_effect = UpstreamFailure("Firebase Auth delete failed")

        with self.assertRaises(UpstreamFailure):
            UserEraser(self.store, identity).erase("uid-1")


if __name__ == "__main__":
    unittest.main()
