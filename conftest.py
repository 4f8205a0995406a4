"""
Shared pytest fixtures.

FakeFirestore keeps documents in a dict keyed by their path, and supports
just the calls firebase_store.py makes:
collection/document/stream/get/set/update/delete.
"""

import copy

import pytest

from debt_settlement import firebase_store


class FakeSnapshot:
    def __init__(self, reference, data):
        self.reference = reference
        self.id = reference.id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeDocument:
    def __init__(self, store, path):
        self._store = store
        self.path = path
        self.id = path[-1]

    def collection(self, name):
        return FakeCollection(self._store, self.path + (name,))

    def set(self, data):
        self._store[self.path] = copy.deepcopy(data)

    def update(self, data):
        if self.path not in self._store:
            raise KeyError(self.path)
        self._store[self.path].update(copy.deepcopy(data))

    def delete(self):
        self._store.pop(self.path, None)

    def get(self):
        return FakeSnapshot(self, self._store.get(self.path))


class FakeCollection:
    def __init__(self, store, path):
        self._store = store
        self.path = path

    def document(self, doc_id):
        return FakeDocument(self._store, self.path + (doc_id,))

    def stream(self):
        depth = len(self.path) + 1
        paths = sorted(
            p for p in self._store
            if len(p) == depth and p[:len(self.path)] == self.path
        )
        return [FakeSnapshot(FakeDocument(self._store, p), self._store[p]) for p in paths]


class FakeFirestore:
    def __init__(self):
        self.docs = {}

    def collection(self, name):
        return FakeCollection(self.docs, (name,))


@pytest.fixture
def fake_db(monkeypatch):
    db = FakeFirestore()
    monkeypatch.setattr(firebase_store, "get_db", lambda: db)
    return db


@pytest.fixture
def no_db(monkeypatch):
    monkeypatch.setattr(firebase_store, "get_db", lambda: None)
