"""
MongoDB document store.

Thin async adapter from the ``DocumentStore`` protocol to pymongo's
asyncio client.  Driver exceptions never leave this module: every
call is wrapped so that connection failures, timeouts and duplicate
keys surface as ``StoreError``.  There is no retry.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from bson.errors import InvalidDocument
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from ..core import db
from .documents import COUNTERS, Document, DocumentStore, Filter, Sort
from .errors import StoreError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _translate_errors(operation: str, collection: str) -> AsyncIterator[None]:
    try:
        yield
    except DuplicateKeyError as e:
        logger.error("Duplicate key during %s on %s: %s", operation, collection, e.details)
        raise StoreError(f"Duplicate key in {collection}") from e
    except PyMongoError as e:
        logger.error("MongoDB %s on %s failed: %s", operation, collection, e)
        raise StoreError(f"MongoDB {operation} on {collection} failed: {e}") from e
    except (OverflowError, InvalidDocument) as e:
        # Raised while encoding, before anything reaches the server.
        logger.error("Cannot encode %s on %s: %s", operation, collection, e)
        raise StoreError(f"Cannot encode {operation} on {collection}: {e}") from e


class MongoDocumentStore(DocumentStore):
    """``DocumentStore`` backed by a MongoDB database."""

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000) -> None:
        self._client = db.get_client(uri, timeout_ms)
        self._db = self._client[database]

    @property
    def database(self):
        return self._db

    async def connect(self) -> None:
        async with _translate_errors("connect", self._db.name):
            await db.init_db(self._db)

    async def close(self) -> None:
        await self._client.close()

    async def find_one(
        self, collection: str, filter: Optional[Filter] = None, sort: Optional[Sort] = None
    ) -> Optional[Document]:
        async with _translate_errors("find_one", collection):
            return await self._db[collection].find_one(filter or {}, sort=sort)

    async def find(
        self,
        collection: str,
        filter: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None,
    ) -> list[Document]:
        async with _translate_errors("find", collection):
            cursor = self._db[collection].find(filter or {})
            if sort:
                cursor = cursor.sort(sort)
            if limit:
                cursor = cursor.limit(limit)
            return await cursor.to_list(None)

    async def insert_one(self, collection: str, document: Document) -> Document:
        stored = dict(document)
        async with _translate_errors("insert_one", collection):
            result = await self._db[collection].insert_one(stored)
        stored["_id"] = result.inserted_id
        return stored

    async def update_one(self, collection: str, filter: Filter, values: Document) -> Optional[Document]:
        async with _translate_errors("update_one", collection):
            return await self._db[collection].find_one_and_update(
                filter,
                {"$set": values},
                return_document=ReturnDocument.AFTER,
            )

    async def delete_one(self, collection: str, filter: Filter) -> bool:
        async with _translate_errors("delete_one", collection):
            result = await self._db[collection].delete_one(filter)
        return result.deleted_count > 0

    async def increment(self, key: str, field: str = "seq", floor: int = 0) -> int:
        # Pipeline update: raise to ``floor`` and add one in a single
        # atomic find-and-modify.
        current = {"$max": [{"$ifNull": [f"${field}", 0]}, floor]}
        async with _translate_errors("increment", COUNTERS):
            counter = await self._db[COUNTERS].find_one_and_update(
                {"_id": key},
                [{"$set": {field: {"$add": [current, 1]}}}],
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
        return int(counter[field])

    async def count(self, collection: str, filter: Optional[Filter] = None) -> int:
        async with _translate_errors("count", collection):
            return await self._db[collection].count_documents(filter or {})
