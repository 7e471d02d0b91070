"""Shared fixtures: environment, an in-memory Mongo double, GitHub page helpers."""

from __future__ import annotations

import copy
import os
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

os.environ.setdefault("GITHUB_CLIENT_ID", "test-client-id")
os.environ.setdefault("GITHUB_CLIENT_SECRET", "test-client-secret")
os.environ.setdefault("ENV", "test")

import httpx
import pytest
import pytest_asyncio
from bson import ObjectId
from pymongo import ReturnDocument

GITHUB_API = "https://api.github.com"


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key_or_list, direction: Optional[int] = None) -> "FakeCursor":
        keys = key_or_list if isinstance(key_or_list, list) else [(key_or_list, direction or 1)]
        for field, order in reversed(keys):
            self._docs.sort(
                key=lambda doc: (doc.get(field) is not None, doc.get(field) or 0),
                reverse=order < 0,
            )
        return self

    def skip(self, count: int) -> "FakeCursor":
        self._docs = self._docs[count:]
        return self

    def limit(self, count: int) -> "FakeCursor":
        if count:
            self._docs = self._docs[:count]
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for doc in self._docs:
            yield doc

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return list(self._docs if length is None else self._docs[:length])


class FakeCollection:
    """Just enough of AsyncCollection for the repositories under test."""

    def __init__(self, name: str):
        self.name = name
        self.docs: Dict[Any, Dict[str, Any]] = {}
        self.write_count = 0

    @staticmethod
    def _matches(doc: Dict[str, Any], query: Dict[str, Any]) -> bool:
        return all(doc.get(key) == value for key, value in query.items())

    def _find(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for doc in self.docs.values():
            if self._matches(doc, query):
                return doc
        return None

    @staticmethod
    def _apply(doc: Dict[str, Any], update: Dict[str, Any], inserted: bool) -> None:
        for key, value in update.get("$set", {}).items():
            doc[key] = value
        for key, value in update.get("$inc", {}).items():
            doc[key] = doc.get(key, 0) + value
        for key in update.get("$unset", {}):
            doc.pop(key, None)
        if inserted:
            for key, value in update.get("$setOnInsert", {}).items():
                doc[key] = value

    def _upsert(self, query: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
        doc = {key: value for key, value in query.items() if not key.startswith("$")}
        doc.setdefault("_id", ObjectId())
        self._apply(doc, update, inserted=True)
        self.docs[doc["_id"]] = doc
        return doc

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = self._find(query)
        return copy.deepcopy(doc) if doc else None

    def find(self, query: Optional[Dict[str, Any]] = None) -> FakeCursor:
        query = query or {}
        return FakeCursor(
            [copy.deepcopy(doc) for doc in self.docs.values() if self._matches(doc, query)]
        )

    async def insert_one(self, document: Dict[str, Any]):
        document.setdefault("_id", ObjectId())
        self.docs[document["_id"]] = copy.deepcopy(document)
        self.write_count += 1
        return SimpleNamespace(inserted_id=document["_id"])

    async def update_one(self, query, update, upsert: bool = False):
        doc = self._find(query)
        if doc is not None:
            self._apply(doc, update, inserted=False)
            self.write_count += 1
            return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)
        if upsert:
            created = self._upsert(query, update)
            self.write_count += 1
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=created["_id"])
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

    async def find_one_and_update(
        self,
        query,
        update,
        upsert: bool = False,
        return_document=ReturnDocument.BEFORE,
    ):
        doc = self._find(query)
        if doc is None:
            if not upsert:
                return None
            created = self._upsert(query, update)
            self.write_count += 1
            return copy.deepcopy(created) if return_document == ReturnDocument.AFTER else None
        before = copy.deepcopy(doc)
        self._apply(doc, update, inserted=False)
        self.write_count += 1
        return copy.deepcopy(doc) if return_document == ReturnDocument.AFTER else before

    async def create_index(self, keys, **kwargs) -> str:
        return kwargs.get("name", "index")


class FakeDatabase:
    name = "devboard-test"

    def __init__(self):
        self._collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self._collections:
            self._collections[name] = FakeCollection(name)
        return self._collections[name]

    def __getattr__(self, name: str) -> FakeCollection:
        if name.startswith("_"):
            raise AttributeError(name)
        return self[name]

    async def command(self, name: str) -> Dict[str, Any]:
        return {"ok": 1}


@pytest.fixture
def db() -> FakeDatabase:
    return FakeDatabase()


class SleepRecorder:
    """Stands in for asyncio.sleep and remembers each requested delay."""

    def __init__(self):
        self.calls: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


def serve_pages(pages: List[List[Dict[str, Any]]]):
    """respx side effect serving ``pages`` by the ``page`` query param with Link headers."""

    def _handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params.get("page", "1"))
        items = pages[page - 1] if 0 < page <= len(pages) else []
        headers = {}
        if page < len(pages):
            next_url = request.url.copy_set_param("page", str(page + 1))
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=items, headers=headers)

    return _handler


def repo_payload(owner: str, name: str) -> Dict[str, Any]:
    return {"name": name, "full_name": f"{owner}/{name}", "owner": {"login": owner}}


@pytest_asyncio.fixture
async def api_client(db):
    """ASGI client with the store dependency pointed at the in-memory database."""
    from devboard.database.mongo import get_db
    from devboard.main import app

    async def _override_db():
        yield db

    app.dependency_overrides[get_db] = _override_db
    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
