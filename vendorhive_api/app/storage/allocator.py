"""
Application-level integer ID issuance.

MongoDB's ``ObjectId`` is not something a person can type into a URL,
so vendors, services, bookings, reviews and users also carry an
integer ``id``.  ``IdAllocator`` hands those out per collection.

With the default ``max`` strategy the next ID is the highest numeric
``id`` currently stored plus one.  Read-then-insert is not atomic:
two concurrent creations in the same collection can compute the same
value, and the unique index on ``id`` then rejects the second insert
with ``StoreError``.  The ``counter`` strategy avoids that by
incrementing a counter document atomically; the counter is raised to
the current maximum first so it never reissues an ID already in use,
even for rows written before the counter existed.
"""

import logging
import math
from typing import Any, Optional

from .documents import DESCENDING, DocumentStore

logger = logging.getLogger(__name__)

STRATEGIES = ("max", "counter")

# BSON integers are signed 64-bit.
MAX_ID = 2**63 - 1


def coerce_id(value: Any) -> Optional[int]:
    """Return ``value`` as a positive int ID, or ``None`` if it is not one.

    Values above ``MAX_ID`` cannot be stored by MongoDB and are rejected
    too, so a lookup with one finds nothing on every backend.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and (math.isnan(value) or not value.is_integer()):
        return None
    value = int(value)
    return value if 0 < value <= MAX_ID else None


class IdAllocator:
    """Issue monotonically increasing integer IDs per collection."""

    def __init__(self, store: DocumentStore, strategy: str = "max") -> None:
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown ID strategy {strategy!r}; expected one of {STRATEGIES}")
        self._store = store
        self._strategy = strategy

    async def current_max(self, collection: str) -> int:
        """Highest valid ``id`` in ``collection``, 0 when there is none."""
        numeric = {"id": {"$type": "number"}}
        newest_first = [("id", DESCENDING)]
        candidates = await self._store.find(collection, numeric, sort=newest_first, limit=1)
        if candidates and coerce_id(candidates[0].get("id")) is None:
            # A fractional or infinite id sorts above the valid ones.
            candidates = await self._store.find(collection, numeric, sort=newest_first)
        for document in candidates:
            current = coerce_id(document.get("id"))
            if current is not None:
                return current
        return 0

    async def next_id(self, collection: str) -> int:
        if self._strategy == "counter":
            floor = await self.current_max(collection)
            next_id = await self._store.increment(collection, floor=floor)
        else:
            next_id = await self.current_max(collection) + 1
        logger.debug("Allocated %s id %s (%s strategy)", collection, next_id, self._strategy)
        return next_id
