import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock

from google.cloud.firestore_v1 import SERVER_TIMESTAMP, Query

from listings_api.db import FirestoreDbClient, InMemoryDbClient


def _snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data
    return snapshot


class InMemoryDbClientTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()

    def test_create_and_get_property(self):
        created = self.db.create_property("u1", {"name": "Flat", "userId": "u9"})
        self.assertEqual(created["userId"], "u1")
        self.assertEqual(created["createdAt"], created["updatedAt"])
        self.assertEqual(self.db.get_property(created["id"]), created)
        self.assertIsNone(self.db.get_property("missing"))

    def test_list_orders_newest_first_and_filters_owner(self):
        a = self.db.create_property("u1", {"name": "a"})
        b = self.db.create_property("u2", {"name": "b"})
        c = self.db.create_property("u1", {"name": "c"})
        self.assertEqual(
            [p["id"] for p in self.db.list_properties()], [c["id"], b["id"], a["id"]]
        )
        self.assertEqual(
            [p["id"] for p in self.db.list_properties(owner_id="u1")], [c["id"], a["id"]]
        )

    def test_returned_documents_are_copies(self):
        created = self.db.create_property("u1", {"name": "Flat", "tags": ["a"]})
        created["tags"].append("b")
        self.assertEqual(self.db.get_property(created["id"])["tags"], ["a"])

    def test_update_merges_and_bumps_timestamp(self):
        created = self.db.create_property("u1", {"name": "Flat", "price": 1})
        updated = self.db.update_property(created["id"], {"price": 2})
        self.assertEqual(updated["name"], "Flat")
        self.assertEqual(updated["price"], 2)
        self.assertGreaterEqual(updated["updatedAt"], created["updatedAt"])

    def test_delete(self):
        created = self.db.create_property("u1", {"name": "Flat"})
        self.db.delete_property(created["id"])
        self.assertIsNone(self.db.get_property(created["id"]))
        self.assertEqual(self.db.list_properties(), [])

    def test_merge_profile_keeps_unspecified_fields(self):
        self.db.create_profile("u1", {"displayName": "Kept"})
        written = self.db.merge_profile("u1", {"address": "X"})
        self.assertEqual(set(written), {"address", "updatedAt"})
        profile = self.db.get_profile("u1")
        self.assertEqual(profile["displayName"], "Kept")
        self.assertEqual(profile["address"], "X")


class FirestoreDbClientTests(unittest.TestCase):
    def setUp(self):
        self.users = MagicMock()
        self.properties = MagicMock()
        client = MagicMock()
        client.collection.side_effect = {
            "users": self.users,
            "properties": self.properties,
        }.__getitem__
        self.db = FirestoreDbClient(client)

    def test_get_profile_absent(self):
        self.users.document.return_value.get.return_value = _snapshot("u1", None, exists=False)
        self.assertIsNone(self.db.get_profile("u1"))
        self.users.document.assert_called_with("u1")

    def test_create_property_uses_server_timestamps(self):
        doc_ref = MagicMock()
        stamp = datetime(2024, 1, 1, tzinfo=timezone.utc)
        doc_ref.get.return_value = _snapshot(
            "p1", {"name": "Flat", "userId": "u1", "createdAt": stamp, "updatedAt": stamp}
        )
        self.properties.add.return_value = (stamp, doc_ref)

        created = self.db.create_property("u1", {"name": "Flat"})

        payload = self.properties.add.call_args.args[0]
        self.assertEqual(payload["userId"], "u1")
        self.assertIs(payload["createdAt"], SERVER_TIMESTAMP)
        self.assertIs(payload["updatedAt"], SERVER_TIMESTAMP)
        self.assertEqual(created["id"], "p1")
        self.assertEqual(created["createdAt"], stamp)

    def test_list_properties_for_owner(self):
        query = self.properties.where.return_value.order_by.return_value
        query.stream.return_value = [_snapshot("p1", {"userId": "u1"})]

        listed = self.db.list_properties(owner_id="u1")

        field_filter = self.properties.where.call_args.kwargs["filter"]
        self.assertEqual(field_filter.field_path, "userId")
        self.assertEqual(field_filter.value, "u1")
        self.properties.where.return_value.order_by.assert_called_once_with(
            "createdAt", direction=Query.DESCENDING
        )
        self.assertEqual(listed, [{"id": "p1", "userId": "u1"}])

    def test_list_all_properties_skips_filter(self):
        self.properties.order_by.return_value.stream.return_value = []
        self.assertEqual(self.db.list_properties(), [])
        self.properties.where.assert_not_called()

    def test_merge_profile_reads_back_timestamp(self):
        stamp = datetime(2024, 1, 2, tzinfo=timezone.utc)
        doc_ref = self.users.document.return_value
        doc_ref.get.return_value = _snapshot("u1", {"address": "X", "updatedAt": stamp})

        written = self.db.merge_profile("u1", {"address": "X"})

        doc_ref.set.assert_called_once_with(
            {"address": "X", "updatedAt": SERVER_TIMESTAMP}, merge=True
        )
        self.assertEqual(written, {"address": "X", "updatedAt": stamp})

    def test_update_and_delete_property(self):
        doc_ref = self.properties.document.return_value
        doc_ref.get.return_value = _snapshot("p1", {"price": 2})

        updated = self.db.update_property("p1", {"price": 2})
        doc_ref.update.assert_called_once_with({"price": 2, "updatedAt": SERVER_TIMESTAMP})
        self.assertEqual(updated, {"id": "p1", "price": 2})

        self.db.delete_property("p1")
        doc_ref.delete.assert_called_once_with()


if __name__ == "__main__":
    unittest.main()
