from __future__ import annotations

"""Shared async repository over one MongoDB collection."""

from abc import ABC
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar

from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.asynchronous.database import AsyncDatabase

ModelT = TypeVar("ModelT", bound=BaseModel)

SortSpec = Sequence[Tuple[str, int]]


class BaseRepository(ABC, Generic[ModelT]):
    """Maps raw documents of ``collection_name`` onto ``model_class``."""

    def __init__(self, db: AsyncDatabase, collection_name: str, model_class: Type[ModelT]):
        self.db = db
        self.collection: AsyncCollection = db[collection_name]
        self.model_class = model_class

    async def find_by_id(self, entity_id: Any) -> Optional[ModelT]:
        return self._to_model(await self.collection.find_one({"_id": entity_id}))

    async def find_many(
        self,
        query: Mapping[str, Any],
        sort: Optional[SortSpec] = None,
        skip: int = 0,
        limit: int = 0,
    ) -> List[ModelT]:
        """Matching documents in ``sort`` order; ``limit=0`` means no limit."""
        cursor = self.collection.find(dict(query))
        if sort:
            cursor = cursor.sort(list(sort))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return [self._to_model(doc) async for doc in cursor]

    async def insert_one(self, document: Dict[str, Any]) -> ModelT:
        result = await self.collection.insert_one(document)
        return self._to_model({**document, "_id": result.inserted_id})

    async def find_one_and_update(
        self,
        query: Mapping[str, Any],
        update: Mapping[str, Any],
        upsert: bool = False,
        return_updated: bool = True,
    ) -> Optional[ModelT]:
        """
        Apply ``update`` atomically to the first match.

        Args:
            query: Filter selecting the document
            update: Update operators (``$set``, ``$inc``, ``$setOnInsert``...)
            upsert: Insert when nothing matches
            return_updated: Return the document after the update instead of before

        Returns:
            The selected document, or None when nothing matched (and, with
            ``return_updated=False``, also when the call inserted)
        """
        doc = await self.collection.find_one_and_update(
            dict(query),
            dict(update),
            upsert=upsert,
            return_document=ReturnDocument.AFTER if return_updated else ReturnDocument.BEFORE,
        )
        return self._to_model(doc)

    async def set_fields(
        self,
        query: Mapping[str, Any],
        fields: Mapping[str, Any],
        upsert: bool = False,
    ) -> bool:
        """
        ``$set`` only ``fields``; everything else in the document is untouched.

        Returns:
            True if a document was matched or created
        """
        result = await self.collection.update_one(
            dict(query), {"$set": dict(fields)}, upsert=upsert
        )
        return result.matched_count > 0 or result.upserted_id is not None

    def _to_model(self, doc: Optional[Dict[str, Any]]) -> Optional[ModelT]:
        if not doc:
            return None
        return self.model_class.model_validate(doc)
