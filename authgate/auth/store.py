"""
Session record persistence.

Two stores share one small interface:

- ``DynamoSessionStore``: a DynamoDB table, upsert by id, lookup by a
  filtered scan on ``username`` (no secondary index)
- ``InMemorySessionStore``: a dict, for development and tests

Neither store expires, rotates or deletes records, and there is no
optimistic locking: two concurrent MFA verifications for the same username
race on read-then-write.
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import BotoCoreError, ClientError

from authgate.config import Settings
from authgate.models import SessionRecord

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the session store cannot be read or written."""
    pass


class SessionStore:
    """Interface for session record storage."""

    def save(self, record: SessionRecord) -> None:
        raise NotImplementedError

    def find_by_username(self, username: str) -> Optional[SessionRecord]:
        raise NotImplementedError


def _latest(records: List[SessionRecord]) -> Optional[SessionRecord]:
    if not records:
        return None
    return max(records, key=lambda r: r.created_at)


class InMemorySessionStore(SessionStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: SessionRecord) -> None:
        with self._lock:
            self._records[record.id] = record.model_copy()

    def find_by_username(self, username: str) -> Optional[SessionRecord]:
        with self._lock:
            matches = [r for r in self._records.values() if r.username == username]
        found = _latest(matches)
        return found.model_copy() if found else None

    def __len__(self) -> int:
        return len(self._records)


class DynamoSessionStore(SessionStore):
    """
    DynamoDB-backed store.

    The table needs a single string hash key named ``id``.
    """

    def __init__(self, table: Any):
        self.table = table

    def save(self, record: SessionRecord) -> None:
        item = record.model_dump(mode="json")
        try:
            self.table.put_item(Item=item)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to save session {record.id}: {e}")
            raise StoreError(f"Failed to save session: {e}") from e

    def find_by_username(self, username: str) -> Optional[SessionRecord]:
        kwargs: Dict[str, Any] = {"FilterExpression": Attr("username").eq(username)}
        records: List[SessionRecord] = []
        try:
            while True:
                page = self.table.scan(**kwargs)
                records.extend(SessionRecord(**item) for item in page.get("Items", []))
                last_key = page.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Failed to look up session for {username}: {e}")
            raise StoreError(f"Failed to look up session: {e}") from e

        if len(records) > 1:
            logger.debug(
                "Multiple sessions for username, using the latest",
                extra={"count": len(records)},
            )
        return _latest(records)


def build_session_store(settings: Settings) -> SessionStore:
    """Select the store implementation from SESSION_STORE_URI."""
    if settings.uses_memory_store:
        return InMemorySessionStore()

    resource = boto3.resource(
        "dynamodb",
        region_name=settings.COGNITO_REGION,
        endpoint_url=settings.SESSION_STORE_URI,
    )
    return DynamoSessionStore(resource.Table(settings.SESSION_TABLE_NAME))
