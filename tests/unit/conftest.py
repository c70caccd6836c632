from datetime import date

import pytest


@pytest.fixture
def today():
    return date(2025, 3, 10)


@pytest.fixture
def make_user():
    def _make(**overrides):
        user = {
            "id": "1001",
            "phone": "0900000001",
            "fullName": "NGUYEN VAN AN",
            "rank": "standard",
            "rankProgress": 0,
            "totalLimit": 2_000_000,
            "balance": 2_000_000,
            "isAdmin": False,
            "lastLoanSeq": 0,
        }
        user.update(overrides)
        return user
    return _make


@pytest.fixture
def make_loan():
    def _make(**overrides):
        loan = {
            "id": "NDV-1001-01",
            "userId": "1001",
            "userName": "NGUYEN VAN AN",
            "amount": 2_000_000,
            "date": "05/03/2025",
            "status": "ĐANG NỢ",
            "fine": 0,
        }
        loan.update(overrides)
        return loan
    return _make


class FakeResult:
    def __init__(self, deleted_count=0):
        self.deleted_count = deleted_count


class FakeCollection:
    def __init__(self, docs=None):
        self.docs = list(docs or [])
        self.bulk_ops = []
        self.inserted = []
        self.updates = []

    def _matches(self, doc, query):
        return all(doc.get(k) == v for k, v in query.items())

    def find(self, query=None, projection=None):
        return [
            {k: v for k, v in doc.items() if k != "_id"}
            for doc in self.docs
            if self._matches(doc, query or {})
        ]

    def find_one(self, query=None, projection=None):
        found = self.find(query, projection)
        return found[0] if found else None

    def bulk_write(self, ops, ordered=True):
        self.bulk_ops.extend(ops)

    def insert_one(self, doc):
        self.inserted.append(doc)

    def insert_many(self, docs):
        self.inserted.extend(docs)

    def update_one(self, query, update, upsert=False):
        self.updates.append((query, update, upsert))

    def delete_one(self, query):
        before = len(self.docs)
        for doc in self.docs:
            if self._matches(doc, query):
                self.docs.remove(doc)
                break
        return FakeResult(before - len(self.docs))

    def delete_many(self, query):
        before = len(self.docs)
        self.docs = [d for d in self.docs if not self._matches(d, query)]
        return FakeResult(before - len(self.docs))


class FakeMongoClient:
    def __init__(self, collections=None):
        self.collections = collections or {}
        self.closed = False
        self.uri = None

    def __getitem__(self, db_name):
        client = self

        class _Database:
            def __getitem__(self, name):
                return client.collections.setdefault(name, FakeCollection())

        return _Database()

    def close(self):
        self.closed = True


@pytest.fixture
def fake_mongo(monkeypatch):
    """Patch MongoClient in the handler and return the shared fake client."""
    client = FakeMongoClient()

    def mock_mongo_client(uri):
        client.uri = uri
        return client

    monkeypatch.setattr("integrations.mongo_handler.MongoClient", mock_mongo_client)
    return client


@pytest.fixture
def fake_collection():
    return FakeCollection
