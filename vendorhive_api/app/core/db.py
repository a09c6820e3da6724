"""
MongoDB connection helpers and index set-up.

This module creates the asyncio MongoDB client used by
``MongoDocumentStore`` and applies the collection indexes on start-up
(``init_db``).  Indexes play the role migrations play for a relational
store: they are idempotent and are (re)applied every time the API
starts.

Uniqueness of the application-level integer ``id`` is enforced here,
by the store, rather than trusted to the allocator.  The partial filter
keeps legacy documents whose ``id`` is missing or not a number out of
the index.
"""

import logging
from typing import Any

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from ..storage.documents import (
    BOOKINGS,
    ENTITY_COLLECTIONS,
    REVIEWS,
    SERVICES,
    USERS,
    VENDORS,
)

_NUMERIC_ID = {"id": {"$type": "number"}}

# (collection, keys, options)
INDEXES: list[tuple[str, list[tuple[str, int]], dict[str, Any]]] = [
    *[
        (name, [("id", ASCENDING)], {"unique": True, "partialFilterExpression": _NUMERIC_ID})
        for name in ENTITY_COLLECTIONS
    ],
    (USERS, [("email", ASCENDING)], {"unique": True}),
    (USERS, [("username", ASCENDING)], {"unique": True}),
    (USERS, [("joined_at", DESCENDING)], {}),
    (VENDORS, [("user_id", ASCENDING)], {}),
    (SERVICES, [("vendor_id", ASCENDING)], {}),
    (BOOKINGS, [("user_id", ASCENDING)], {}),
    (BOOKINGS, [("vendor_id", ASCENDING)], {}),
    (REVIEWS, [("vendor_id", ASCENDING)], {}),
]


def get_client(uri: str, timeout_ms: int = 5000) -> AsyncMongoClient:
    """Create a new asyncio MongoDB client.

    The client connects lazily; ``tz_aware`` makes the driver return
    timezone-aware UTC datetimes, matching what the in-memory backend
    stores.
    """
    return AsyncMongoClient(uri, tz_aware=True, serverSelectionTimeoutMS=timeout_ms)


async def init_db(database: AsyncDatabase) -> None:
    """Verify connectivity and create all indexes."""
    logger = logging.getLogger(__name__)
    await database.client.admin.command("ping")
    for collection, keys, options in INDEXES:
        await database[collection].create_index(keys, **options)
    logger.info("MongoDB database %s ready (%d indexes ensured)", database.name, len(INDEXES))
