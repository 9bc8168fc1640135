"""Tests for the storage backends."""

import io
import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from yearplanner.adapters import FileStore, MemoryStore, ObjectStore, create_store
from yearplanner.config import Config, StorageType

SAMPLE_EVENTS = [
    {"id": "1", "title": "Midsommar", "startDate": "06-20", "endDate": "", "recurring": True},
    {"id": "2", "title": "Kräftskiva", "startDate": "2025-08-15", "recurring": False, "extra": {"a": [1, 2]}},
]


class FakeS3:
    """Minimal in-memory stand-in for a boto3 S3 client."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}

    def put_object(self, Bucket, Key, Body, ContentType=None):
        self.objects[Key] = Body

    def get_object(self, Bucket, Key):
        if Key not in self.objects:
            raise ClientError({"Error": {"Code": "NoSuchKey", "Message": "missing"}}, "GetObject")
        return {"Body": io.BytesIO(self.objects[Key])}

    def delete_object(self, Bucket, Key):
        self.objects.pop(Key, None)

    def get_paginator(self, name):
        assert name == "list_objects_v2"
        paginator = MagicMock()
        paginator.paginate.side_effect = lambda Bucket, Prefix: [
            {"Contents": [{"Key": k} for k in sorted(self.objects) if k.startswith(Prefix)]}
        ]
        return paginator


@pytest.fixture(params=["memory", "file", "object"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore()
    if request.param == "file":
        return FileStore(tmp_path / "data")
    return ObjectStore(FakeS3(), "bucket")


class TestItemStoreContract:
    def test_round_trip(self, store):
        assert store.save("alice", "events", SAMPLE_EVENTS) is True
        assert store.load("alice", "events") == SAMPLE_EVENTS

    def test_load_missing_is_empty(self, store):
        assert store.load("nobody", "events") == []

    def test_save_overwrites(self, store):
        store.save("alice", "tasks", [{"id": "1"}, {"id": "2"}])
        store.save("alice", "tasks", [{"id": "3"}])
        assert store.load("alice", "tasks") == [{"id": "3"}]

    def test_users_are_isolated(self, store):
        store.save("alice", "events", SAMPLE_EVENTS)
        assert store.load("bob", "events") == []

    def test_list(self, store):
        store.save("alice", "events", [])
        store.save("alice", "tasks", [])
        store.save("bob", "tasks", [])
        assert store.list("alice") == {"events", "tasks"}
        assert store.list("bob") == {"tasks"}
        assert store.list("carol") == set()

    def test_clear(self, store):
        store.save("alice", "events", SAMPLE_EVENTS)
        store.clear()
        assert store.load("alice", "events") == []
        assert store.list("alice") == set()


class TestMemoryStore:
    def test_returned_items_are_copies(self):
        store = MemoryStore()
        store.save("alice", "events", SAMPLE_EVENTS)
        loaded = store.load("alice", "events")
        loaded.append({"id": "mutated"})
        assert store.load("alice", "events") == SAMPLE_EVENTS

    def test_instances_do_not_share_state(self):
        a, b = MemoryStore(), MemoryStore()
        a.save("alice", "events", SAMPLE_EVENTS)
        assert b.load("alice", "events") == []


class TestFileStore:
    def test_file_layout(self, tmp_path):
        store = FileStore(tmp_path)
        store.save("alice", "events", SAMPLE_EVENTS)
        path = tmp_path / "alice" / "events.json"
        assert path.exists()
        assert json.loads(path.read_text()) == SAMPLE_EVENTS

    def test_malformed_json_is_empty(self, tmp_path):
        (tmp_path / "alice").mkdir()
        (tmp_path / "alice" / "events.json").write_text("{not json")
        assert FileStore(tmp_path).load("alice", "events") == []

    def test_non_array_is_empty(self, tmp_path):
        (tmp_path / "alice").mkdir()
        (tmp_path / "alice" / "events.json").write_text('{"id": "1"}')
        assert FileStore(tmp_path).load("alice", "events") == []

    def test_creates_data_dir(self, tmp_path):
        FileStore(tmp_path / "nested" / "data")
        assert (tmp_path / "nested" / "data").is_dir()

    def test_list_does_not_match_longer_user_ids(self, tmp_path):
        store = FileStore(tmp_path)
        store.save("alice_bob", "events", [{"id": "secret"}])
        assert store.list("alice") == set()
        assert store.list("alice_bob") == {"events"}

    @pytest.mark.parametrize("user_id", ["../escaped", "..", "nested/user"])
    def test_user_id_cannot_leave_data_dir(self, tmp_path, user_id):
        data_dir = tmp_path / "data"
        store = FileStore(data_dir)

        assert store.save(user_id, "events", SAMPLE_EVENTS) is False
        assert store.load(user_id, "events") == []
        assert list(tmp_path.rglob("*.json")) == []

    def test_data_type_cannot_leave_user_dir(self, tmp_path):
        store = FileStore(tmp_path / "data")
        assert store.save("alice", "../../events", []) is False
        assert list(tmp_path.rglob("*.json")) == []


class TestObjectStore:
    def test_non_array_object_is_empty(self):
        client = FakeS3()
        client.objects["users/alice/events.json"] = b'{"id": "1"}'
        assert ObjectStore(client, "bucket").load("alice", "events") == []

    def test_object_keys(self):
        client = FakeS3()
        ObjectStore(client, "bucket").save("alice", "events", SAMPLE_EVENTS)
        assert list(client.objects) == ["users/alice/events.json"]

    def test_other_client_errors_are_empty(self):
        client = MagicMock()
        client.get_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "no"}}, "GetObject"
        )
        assert ObjectStore(client, "bucket").load("alice", "events") == []

    def test_malformed_object_is_empty(self):
        client = FakeS3()
        client.objects["users/alice/events.json"] = b"not json"
        assert ObjectStore(client, "bucket").load("alice", "events") == []

    def test_save_failure_reports_false(self):
        client = MagicMock()
        client.put_object.side_effect = ClientError(
            {"Error": {"Code": "InternalError", "Message": "boom"}}, "PutObject"
        )
        assert ObjectStore(client, "bucket").save("alice", "events", []) is False


class TestCreateStore:
    def test_memory_default(self):
        assert isinstance(create_store(Config()), MemoryStore)

    def test_local(self, tmp_path):
        store = create_store(Config(storage_type=StorageType.LOCAL, data_dir=str(tmp_path)))
        assert isinstance(store, FileStore)
        assert store.data_dir == tmp_path

    def test_object_storage_requires_bucket(self):
        with pytest.raises(ValueError):
            create_store(Config(storage_type=StorageType.OBJECT_STORAGE))
