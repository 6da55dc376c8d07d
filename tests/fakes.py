"""
In-memory substitute for the parts of pymongo's async database API the
repositories use.

Documents are deep-copied on the way in and out so tests observe stored
state, not shared references. Filters support top-level equality only.
"""

from __future__ import annotations

import copy
from typing import Any

from bson import ObjectId
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult, InsertOneResult


def _matches(doc: dict[str, Any], query: dict[str, Any]) -> bool:
    return all(doc.get(key) == value for key, value in query.items())


class FakeCursor:
    """Async iterator over a snapshot of matching documents."""

    def __init__(self, docs: list[dict[str, Any]]) -> None:
        self._docs = iter(docs)

    def __aiter__(self) -> FakeCursor:
        return self

    async def __anext__(self) -> dict[str, Any]:
        try:
            return next(self._docs)
        except StopIteration:
            raise StopAsyncIteration from None


class FakeCollection:
    def __init__(self, name: str) -> None:
        self.name = name
        self.docs: list[dict[str, Any]] = []
        self.calls: list[str] = []

    async def find_one(self, query: dict[str, Any]) -> dict[str, Any] | None:
        self.calls.append("find_one")
        for doc in self.docs:
            if _matches(doc, query):
                return copy.deepcopy(doc)
        return None

    def find(self, query: dict[str, Any]) -> FakeCursor:
        self.calls.append("find")
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query)])

    async def insert_one(self, document: dict[str, Any]) -> InsertOneResult:
        self.calls.append("insert_one")
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self.docs.append(stored)
        return InsertOneResult(stored["_id"], acknowledged=True)

    async def find_one_and_update(
        self,
        query: dict[str, Any],
        update: dict[str, Any],
        return_document: bool = False,
    ) -> dict[str, Any] | None:
        self.calls.append("find_one_and_update")
        for doc in self.docs:
            if _matches(doc, query):
                before = copy.deepcopy(doc)
                doc.update(copy.deepcopy(update.get("$set", {})))
                return copy.deepcopy(doc) if return_document else before
        return None

    async def delete_one(self, query: dict[str, Any]) -> DeleteResult:
        self.calls.append("delete_one")
        for index, doc in enumerate(self.docs):
            if _matches(doc, query):
                del self.docs[index]
                return DeleteResult({"n": 1}, acknowledged=True)
        return DeleteResult({"n": 0}, acknowledged=True)


class FailingCollection:
    """Collection whose every operation fails like an unreachable server."""

    def __init__(self, error: PyMongoError) -> None:
        self.error = error

    async def find_one(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error

    def find(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error

    async def insert_one(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error

    async def find_one_and_update(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error

    async def delete_one(self, *args: Any, **kwargs: Any) -> Any:
        raise self.error


class FakeDatabase:
    def __init__(self) -> None:
        self.collections: dict[str, Any] = {}
        self.ping_error: PyMongoError | None = None

    def __getitem__(self, name: str) -> Any:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    def fail_with(self, error: PyMongoError) -> None:
        """Make every collection and ping raise ``error``."""
        self.ping_error = error
        for name in ("users", "products", "orders"):
            self.collections[name] = FailingCollection(error)

    async def command(self, name: str) -> dict[str, Any]:
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1.0}
