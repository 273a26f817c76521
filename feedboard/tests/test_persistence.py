import json
import unittest
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from botocore.exceptions import ClientError
from redis import exceptions as redis_exceptions

from feedboard.persistence import SnapshotPersistence, StorageKeys
from feedboard.schemas import Comment, Company, Feedback, FeedbackCategory, User
from feedboard.state import AppState
from feedboard.storage import (
    InMemoryKeyValueStorage,
    ObjectKeyValueStorage,
    RedisKeyValueStorage,
    SqlKeyValueStorage,
)
from feedboard.store import FeedbackStore

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)
_COMPANIES_JSON = json.dumps(
    [{"id": "c1", "name": "Acme", "slug": "acme", "createdAt": "2024-01-01T00:00:00Z"}]
)


def sample_state(user=None) -> AppState:
    company = Company(id="c1", name="Acme", slug="acme", owner_id=None, created_at=T0)
    feedback = Feedback(
        id="f1",
        title="Dark mode",
        description="Please",
        category=FeedbackCategory.FEATURE,
        board_id="b1",
        author_name="Anonymous",
        upvotes=("anonymous-abc123xyz",),
        comment_count=1,
        created_at=T0,
        updated_at=T0,
    )
    comment = Comment(
        id="m1", content="+1", feedback_id="f1", author_name="Anonymous", created_at=T0
    )
    return AppState(
        companies=(company,),
        feedbacks=(feedback,),
        comments=(comment,),
        current_user=user,
        is_loading=False,
    )


class SnapshotPersistenceTests(unittest.TestCase):
    def setUp(self):
        self.storage = InMemoryKeyValueStorage()
        self.persistence = SnapshotPersistence(self.storage)

    def test_keys_use_prefix(self):
        keys = StorageKeys.with_prefix("demo")
        self.assertEqual(keys.companies, "demo-companies")
        self.assertEqual(keys.user, "demo-user")
        self.assertEqual(self.persistence.keys.feedbacks, "feedback-board-feedbacks")

    def test_empty_storage_loads_defaults(self):
        snapshot = self.persistence.load()
        self.assertEqual(snapshot.companies, ())
        self.assertEqual(snapshot.comments, ())
        self.assertIsNone(snapshot.current_user)

    def test_wire_format_is_camel_case_with_anonymous_sentinel(self):
        self.persistence.save(sample_state())
        companies = json.loads(self.storage.items["feedback-board-companies"])
        self.assertEqual(companies[0]["ownerId"], "anonymous")
        self.assertIn("createdAt", companies[0])
        self.assertIn("primaryColor", companies[0])

        feedbacks = json.loads(self.storage.items["feedback-board-feedbacks"])
        self.assertEqual(feedbacks[0]["authorId"], "anonymous")
        self.assertEqual(feedbacks[0]["commentCount"], 1)
        self.assertEqual(feedbacks[0]["status"], "under-review")
        self.assertEqual(feedbacks[0]["upvotes"], ["anonymous-abc123xyz"])
        self.assertEqual(json.loads(self.storage.items["feedback-board-boards"]), [])

    def test_save_then_load(self):
        user = User(id="u1", name="Ada", email="ada@example.com", created_at=T0)
        state = sample_state(user)
        self.persistence.save(state)
        snapshot = self.persistence.load()
        self.assertEqual(snapshot.companies, state.companies)
        self.assertEqual(snapshot.feedbacks, state.feedbacks)
        self.assertEqual(snapshot.comments, state.comments)
        self.assertEqual(snapshot.current_user, user)
        self.assertIsNone(snapshot.companies[0].owner_id)

    def test_user_key_removed_when_signed_out(self):
        self.storage.set_item("feedback-board-user", '{"stale": true}')
        self.persistence.save(sample_state())
        self.assertNotIn("feedback-board-user", self.storage.items)

    def test_malformed_key_degrades_alone(self):
        self.persistence.save(sample_state())
        self.storage.set_item("feedback-board-comments", "{not json")
        self.storage.set_item("feedback-board-boards", '[{"id": "b1"}]')
        with self.assertLogs("feedboard.persistence", level="WARNING") as logs:
            snapshot = self.persistence.load()
        self.assertEqual(snapshot.comments, ())
        self.assertEqual(snapshot.boards, ())
        self.assertEqual(len(snapshot.companies), 1)
        self.assertEqual(len(snapshot.feedbacks), 1)
        self.assertEqual(len([r for r in logs.records if r.levelname == "WARNING"]), 2)

    def test_loads_legacy_browser_snapshot(self):
        self.storage.set_item(
            "feedback-board-feedbacks",
            json.dumps(
                [
                    {
                        "id": "f1",
                        "title": "Export",
                        "description": "CSV",
                        "category": "feature",
                        "status": "planned",
                        "boardId": "b1",
                        "authorId": "anonymous",
                        "authorName": "Anonymous",
                        "upvotes": ["u1", "u2", "u1"],
                        "commentCount": 0,
                        "createdAt": "2024-01-01T00:00:00.000Z",
                        "updatedAt": "2024-01-02T00:00:00.000Z",
                    }
                ]
            ),
        )
        self.storage.set_item("feedback-board-user", "null")
        snapshot = self.persistence.load()
        feedback = snapshot.feedbacks[0]
        self.assertIsNone(feedback.author_id)
        self.assertEqual(feedback.upvotes, ("u1", "u2"))
        self.assertEqual(feedback.created_at, T0)
        self.assertIsNone(snapshot.current_user)


class SqlKeyValueStorageTests(unittest.TestCase):
    """
    Uses SQLite via SQLAlchemy URL for fast/local testing.
    """

    def setUp(self):
        self.storage = SqlKeyValueStorage("sqlite+pysqlite:///:memory:")

    def test_requires_url(self):
        with self.assertRaises(ValueError):
            SqlKeyValueStorage("")

    def test_set_get_overwrite_remove(self):
        self.assertIsNone(self.storage.get_item("k"))
        self.storage.set_item("k", "[]")
        self.assertEqual(self.storage.get_item("k"), "[]")
        self.storage.set_item("k", "[1]")
        self.assertEqual(self.storage.get_item("k"), "[1]")
        self.storage.remove_item("k")
        self.assertIsNone(self.storage.get_item("k"))
        self.storage.remove_item("k")

    def test_snapshot_through_sql(self):
        persistence = SnapshotPersistence(self.storage, key_prefix="sql")
        state = sample_state()
        persistence.save(state)
        self.assertEqual(persistence.load().feedbacks, state.feedbacks)


class RedisKeyValueStorageTests(unittest.TestCase):
    @patch("feedboard.storage.redis.Redis.from_url")
    def test_roundtrip_calls(self, mock_from_url):
        client = MagicMock()
        client.get.return_value = b"[]"
        mock_from_url.return_value = client

        storage = RedisKeyValueStorage(url="redis://localhost:6379/0")
        storage.set_item("k", "[]")
        self.assertEqual(storage.get_item("k"), "[]")
        storage.remove_item("k")

        client.set.assert_called_once_with("k", b"[]")
        client.delete.assert_called_once_with("k")

    @patch("feedboard.storage.redis.Redis.from_url")
    def test_missing_key_is_none(self, mock_from_url):
        mock_from_url.return_value.get.return_value = None
        storage = RedisKeyValueStorage(url="redis://localhost:6379/0")
        self.assertIsNone(storage.get_item("k"))

    @patch("feedboard.storage.redis.Redis.from_url")
    def test_reconnects_after_connection_error(self, mock_from_url):
        client = MagicMock()
        client.get.side_effect = [redis_exceptions.ConnectionError("reset"), b"{}"]
        mock_from_url.return_value = client

        storage = RedisKeyValueStorage(url="redis://localhost:6379/0")
        self.assertEqual(storage.get_item("k"), "{}")
        self.assertEqual(mock_from_url.call_count, 2)

    @patch("feedboard.storage.redis.Redis.from_url")
    def test_undecodable_key_degrades_alone(self, mock_from_url):
        values = {
            "feedback-board-companies": _COMPANIES_JSON.encode("utf-8"),
            "feedback-board-comments": b"\xff\xfe[",
        }
        client = MagicMock()
        client.get.side_effect = values.get
        client.set.side_effect = values.__setitem__
        mock_from_url.return_value = client

        store = FeedbackStore(
            SnapshotPersistence(RedisKeyValueStorage(url="redis://localhost:6379/0"))
        )
        with self.assertLogs("feedboard.persistence", level="WARNING"):
            store.load()
        self.assertEqual([c.id for c in store.state.companies], ["c1"])
        self.assertEqual(store.state.comments, ())

        store.login("Ada", "ada@example.com")
        saved = json.loads(values["feedback-board-companies"])
        self.assertEqual([c["id"] for c in saved], ["c1"])


class ObjectKeyValueStorageTests(unittest.TestCase):
    def make_storage(self):
        return ObjectKeyValueStorage(
            bucket="bucket",
            region="ap-guangzhou",
            endpoint="https://cos.example.test",
            access_key_id="id",
            secret_access_key="secret",
        )

    @patch("feedboard.storage.boto3.client")
    def test_put_and_get(self, mock_client):
        s3 = mock_client.return_value
        body = MagicMock()
        body.read.return_value = b"[]"
        s3.get_object.return_value = {"Body": body}

        storage = self.make_storage()
        storage.set_item("feedback-board-boards", "[]")
        self.assertEqual(storage.get_item("feedback-board-boards"), "[]")

        put_kwargs = s3.put_object.call_args.kwargs
        self.assertEqual(put_kwargs["Key"], "feedback-board-boards.json")
        self.assertEqual(put_kwargs["ContentType"], "application/json")
        s3.get_object.assert_called_once_with(
            Bucket="bucket", Key="feedback-board-boards.json"
        )

    @patch("feedboard.storage.boto3.client")
    def test_missing_object_is_none(self, mock_client):
        mock_client.return_value.get_object.side_effect = ClientError(
            {"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject"
        )
        storage = self.make_storage()
        self.assertIsNone(storage.get_item("k"))

    @patch("feedboard.storage.boto3.client")
    def test_other_errors_propagate(self, mock_client):
        mock_client.return_value.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "nope"}}, "GetObject"
        )
        storage = self.make_storage()
        with self.assertRaises(ClientError):
            storage.get_item("k")

    @patch("feedboard.storage.boto3.client")
    def test_remove_deletes_object(self, mock_client):
        storage = self.make_storage()
        storage.remove_item("k")
        mock_client.return_value.delete_object.assert_called_once_with(
            Bucket="bucket", Key="k.json"
        )


if __name__ == "__main__":
    unittest.main()
