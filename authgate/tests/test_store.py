"""
Session store tests: in-memory behaviour and the DynamoDB item mapping.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock, patch

import pytest
from botocore.exceptions import ClientError

from authgate.auth.store import (
    DynamoSessionStore,
    InMemorySessionStore,
    StoreError,
    build_session_store,
)
from authgate.models import SessionRecord


def make_record(username="alice", minutes_ago=0, **kwargs):
    created = datetime.now(timezone.utc) - timedelta(minutes=minutes_ago)
    return SessionRecord(username=username, created_at=created, **kwargs)


class TestInMemorySessionStore:

    def test_find_missing(self):
        assert InMemorySessionStore().find_by_username("alice") is None

    def test_save_is_upsert_by_id(self):
        store = InMemorySessionStore()
        record = make_record()
        store.save(record)

        record.mfa_verified = True
        store.save(record)

        assert len(store) == 1
        assert store.find_by_username("alice").mfa_verified is True

    def test_returned_record_is_a_copy(self):
        store = InMemorySessionStore()
        store.save(make_record())

        found = store.find_by_username("alice")
        found.mfa_verified = True

        assert store.find_by_username("alice").mfa_verified is False

    def test_latest_record_wins(self):
        store = InMemorySessionStore()
        old = make_record(minutes_ago=10, challenge_session="old")
        new = make_record(minutes_ago=1, challenge_session="new")
        store.save(new)
        store.save(old)

        assert store.find_by_username("alice").challenge_session == "new"


class TestDynamoSessionStore:

    @pytest.fixture
    def table(self):
        return Mock()

    def test_save_puts_json_item(self, table):
        record = make_record(user_agent="Mozilla/5.0", remote_addr="203.0.113.7")

        DynamoSessionStore(table).save(record)

        item = table.put_item.call_args.kwargs["Item"]
        assert item["id"] == record.id
        assert item["username"] == "alice"
        assert item["mfa_verified"] is False
        assert isinstance(item["created_at"], str)

    def test_find_scans_all_pages(self, table):
        first = make_record(minutes_ago=5, challenge_session="a")
        second = make_record(minutes_ago=1, challenge_session="b")
        table.scan.side_effect = [
            {"Items": [first.model_dump(mode="json")], "LastEvaluatedKey": {"id": first.id}},
            {"Items": [second.model_dump(mode="json")]},
        ]

        found = DynamoSessionStore(table).find_by_username("alice")

        assert found.challenge_session == "b"
        assert table.scan.call_count == 2
        assert table.scan.call_args_list[1].kwargs["ExclusiveStartKey"] == {"id": first.id}

    def test_find_missing(self, table):
        table.scan.return_value = {"Items": []}

        assert DynamoSessionStore(table).find_by_username("nobody") is None

    def test_client_error_becomes_store_error(self, table):
        table.put_item.side_effect = ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "no table"}},
            "PutItem",
        )

        with pytest.raises(StoreError):
            DynamoSessionStore(table).save(make_record())


def test_build_memory_store(settings):
    assert isinstance(build_session_store(settings), InMemorySessionStore)


def test_build_dynamo_store(settings):
    settings.SESSION_STORE_URI = "http://localhost:8000"
    settings.SESSION_TABLE_NAME = "sessions"

    with patch("authgate.auth.store.boto3.resource") as mock_resource:
        store = build_session_store(settings)

    mock_resource.assert_called_once_with(
        "dynamodb", region_name="eu-west-1", endpoint_url="http://localhost:8000"
    )
    mock_resource.return_value.Table.assert_called_once_with("sessions")
    assert isinstance(store, DynamoSessionStore)
