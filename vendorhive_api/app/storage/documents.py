"""
The document-store protocol the repository is written against.

A backend only needs collection-scoped find / find-one / insert /
update / delete with equality, ``$in``, ``$or``, ``$type: "number"``
and case-insensitive regular-expression matching, plus sorting by a
field.  Filters are plain MongoDB filter documents; regular
expressions are passed as compiled ``re.Pattern`` objects, which
pymongo encodes natively.
"""

import abc
from typing import Any, Optional

USERS = "users"
VENDORS = "vendors"
SERVICES = "services"
BOOKINGS = "bookings"
REVIEWS = "reviews"
COUNTERS = "counters"

ENTITY_COLLECTIONS = (USERS, VENDORS, SERVICES, BOOKINGS, REVIEWS)

ASCENDING = 1
DESCENDING = -1

Document = dict[str, Any]
Filter = dict[str, Any]
Sort = list[tuple[str, int]]


class DocumentStore(abc.ABC):
    """Async collection operations shared by every storage backend."""

    async def connect(self) -> None:
        """Prepare the backend (open connections, create indexes)."""

    async def close(self) -> None:
        """Release backend resources."""

    @abc.abstractmethod
    async def find_one(
        self, collection: str, filter: Optional[Filter] = None, sort: Optional[Sort] = None
    ) -> Optional[Document]:
        ...

    @abc.abstractmethod
    async def find(
        self,
        collection: str,
        filter: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None,
    ) -> list[Document]:
        ...

    @abc.abstractmethod
    async def insert_one(self, collection: str, document: Document) -> Document:
        """Insert and return the stored document, including its ``_id``."""

    @abc.abstractmethod
    async def update_one(self, collection: str, filter: Filter, values: Document) -> Optional[Document]:
        """``$set`` ``values`` on the first match and return it, or ``None``."""

    @abc.abstractmethod
    async def delete_one(self, collection: str, filter: Filter) -> bool:
        ...

    @abc.abstractmethod
    async def increment(self, key: str, field: str = "seq", floor: int = 0) -> int:
        """Atomically add one to ``field`` of counter ``key`` and return it.

        The counter is first raised to at least ``floor`` so a new
        counter starts above the ids already in use.
        """

    async def count(self, collection: str, filter: Optional[Filter] = None) -> int:
        return len(await self.find(collection, filter))
