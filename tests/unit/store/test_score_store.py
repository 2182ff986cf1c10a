"""Tests for the Firestore-backed score store."""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

import pytest
from google.cloud import firestore

from leaderboard.store.errors import DeleteError, ReadError, WriteError
from leaderboard.store.score_store import FirestoreScoreStore


class _FakeSnapshot:
    def __init__(self, doc_id: str, data: Dict[str, Any] | None) -> None:
        self.id = doc_id
        self._data = data

    def to_dict(self) -> Dict[str, Any] | None:
        return self._data


class _FakeDocumentReference:
    def __init__(self, collection: "_FakeCollectionReference", doc_id: str) -> None:
        self._collection = collection
        self.id = doc_id

    def set(self, payload: Dict[str, Any]) -> None:
        if self._collection.raise_on_set:
            raise RuntimeError("set-failed")
        self._collection.operations.append(("set", self.id, payload))
        self._collection.documents[self.id] = dict(payload)

    def delete(self) -> None:
        if self._collection.raise_on_delete:
            raise RuntimeError("delete-failed")
        self._collection.operations.append(("delete", self.id, None))
        self._collection.documents.pop(self.id, None)


class _FakeCollectionReference:
    def __init__(self, name: str, documents: Dict[str, Dict[str, Any] | None]) -> None:
        self.name = name
        self.documents = documents
        self.raise_on_stream = False
        self.raise_on_set = False
        self.raise_on_delete = False
        self.operations: List[Tuple[str, str, Dict[str, Any] | None]] = []

    def stream(self):
        for doc_id, data in list(self.documents.items()):
            if self.raise_on_stream:
                raise RuntimeError("stream-failed")
            yield _FakeSnapshot(doc_id, data)

    def document(self, doc_id: str) -> _FakeDocumentReference:
        return _FakeDocumentReference(self, doc_id)


class _FakeFirestoreClient:
    def __init__(self, documents: Dict[str, Dict[str, Any] | None] | None = None) -> None:
        self.collections: Dict[str, _FakeCollectionReference] = {}
        self._documents = documents or {}

    def collection(self, name: str) -> _FakeCollectionReference:
        if name not in self.collections:
            self.collections[name] = _FakeCollectionReference(name, self._documents)
        return self.collections[name]


def test_enumerate_returns_every_document_in_stream_order():
    client = _FakeFirestoreClient({"0xA8F4": {"score": 50}, "0xa8f4": {"score": 120}, "empty": None})
    store = FirestoreScoreStore(project="demo", collection="scores", client=client)

    assert store.enumerate() == [("0xA8F4", {"score": 50}), ("0xa8f4", {"score": 120}), ("empty", {})]


def test_enumerate_wraps_stream_failures_in_read_error():
    client = _FakeFirestoreClient({"a": {"score": 1}})
    store = FirestoreScoreStore(project="demo", collection="scores", client=client)
    client.collection("scores").raise_on_stream = True

    with pytest.raises(ReadError):
        store.enumerate()


def test_put_overwrites_document_and_delete_removes_it():
    client = _FakeFirestoreClient({"0xab": {"score": 1, "stale": True}})
    store = FirestoreScoreStore(project="demo", collection="scores", client=client)

    store.put("0xab", {"score": 9})
    store.delete("0xAB")

    collection = client.collection("scores")
    assert collection.documents == {"0xab": {"score": 9}}
    assert [op[:2] for op in collection.operations] == [("set", "0xab"), ("delete", "0xAB")]


def test_put_and_delete_wrap_errors_with_key():
    client = _FakeFirestoreClient()
    store = FirestoreScoreStore(project="demo", collection="scores", client=client)
    collection = client.collection("scores")
    collection.raise_on_set = True
    collection.raise_on_delete = True

    with pytest.raises(WriteError) as write_info:
        store.put("0xab", {"score": 1})
    with pytest.raises(DeleteError) as delete_info:
        store.delete("0xAB")

    assert write_info.value.key == "0xab"
    assert delete_info.value.key == "0xAB"


def test_server_timestamp_uses_firestore_sentinel():
    store = FirestoreScoreStore(project="demo", collection="scores", client=_FakeFirestoreClient())

    assert store.server_timestamp() is firestore.SERVER_TIMESTAMP
    assert store.collection_name == "scores"


def test_requires_project_and_collection():
    with pytest.raises(ValueError):
        FirestoreScoreStore(project="", collection="scores", client=_FakeFirestoreClient())
    with pytest.raises(ValueError):
        FirestoreScoreStore(project="demo", collection="", client=_FakeFirestoreClient())
