import operator
from datetime import datetime, timezone
from itertools import count
from unittest.mock import AsyncMock, MagicMock

import pytest
from firebase_admin import firestore

from sparkd_notifications.config import Settings
from sparkd_notifications.events import EventBus
from sparkd_notifications.schemas import User
from sparkd_notifications.store import FirestoreStore

FIXED_NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)

OPERATORS = {
    "<": operator.lt,
    "<=": operator.le,
    "==": operator.eq,
    ">": operator.gt,
    ">=": operator.ge,
}


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def get(self):
        return FakeSnapshot(self, self.collection.docs.get(self.id))

    def set(self, data):
        self.collection.docs[self.id] = dict(data)

    def delete(self):
        self.collection.docs.pop(self.id, None)


class FakeQuery:
    """Evaluates FieldFilter chains the way Firestore would for simple fields."""

    def __init__(self, collection, filters=(), limit=None):
        self.collection = collection
        self.filters = filters
        self._limit = limit

    def where(self, filter):
        return FakeQuery(self.collection, self.filters + (filter,), self._limit)

    def limit(self, count):
        return FakeQuery(self.collection, self.filters, count)

    def _matches(self, data):
        return all(
            f.field_path in data and OPERATORS[f.op_string](data[f.field_path], f.value)
            for f in self.filters
        )

    def get(self):
        results = [
            FakeSnapshot(FakeDocumentRef(self.collection, doc_id), data)
            for doc_id, data in self.collection.docs.items()
            if self._matches(data)
        ]
        return results if self._limit is None else results[:self._limit]


class FakeCollection(FakeQuery):
    def __init__(self, name, clock):
        super().__init__(self)
        self.name = name
        self.docs = {}
        self._clock = clock
        self._ids = count(1)

    def document(self, doc_id):
        return FakeDocumentRef(self, doc_id)

    def add(self, data):
        ref = FakeDocumentRef(self, f"{self.name}-{next(self._ids)}")
        now = self._clock()
        ref.set({k: now if v is firestore.SERVER_TIMESTAMP else v for k, v in data.items()})
        return now, ref


class FakeBatch:
    def __init__(self, firestore_db):
        self.firestore_db = firestore_db
        self.deletes = []

    def delete(self, reference):
        self.deletes.append(reference)

    def commit(self):
        for reference in self.deletes:
            reference.delete()
        self.firestore_db.commits.append(list(self.deletes))


class FakeFirestore:
    """Just enough of google.cloud.firestore.Client for FirestoreStore."""

    def __init__(self, clock=lambda: FIXED_NOW):
        self._clock = clock
        self.collections = {}
        self.commits = []

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(name, self._clock)
        return self.collections[name]

    def batch(self):
        return FakeBatch(self)


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def store(fake_db, settings):
    return FirestoreStore(fake_db, settings)


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def push_client():
    client = MagicMock()
    client.send = AsyncMock(return_value="projects/sparkd/messages/0:1")
    return client


@pytest.fixture
def mock_store():
    """Record store double for handler tests that don't care about Firestore."""
    mock = MagicMock()
    mock.get_user = AsyncMock(return_value=User(fcmToken="token-123"))
    mock.add_notification = AsyncMock(side_effect=[f"notif-{i}" for i in range(1, 10)])
    mock.find_read_notifications_before = AsyncMock(return_value=[])
    mock.delete_all = AsyncMock(return_value=0)
    return mock
