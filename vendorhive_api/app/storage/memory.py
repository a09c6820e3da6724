"""
In-process document store.

``MemoryDocumentStore`` keeps every collection as an insertion-ordered
list of dicts and evaluates the small subset of MongoDB filter syntax
the repository uses.  It exists for tests and local development, so it
mimics the MongoDB behaviour the repository can observe:

* every document gets an ``ObjectId`` ``_id`` on insert;
* documents are copied in and out, so callers never share state with
  the store;
* sorting follows BSON cross-type ordering (null < numbers < strings <
  objects < arrays < ObjectId < booleans < dates);
* the unique indexes created by ``core.db.init_db`` are enforced and a
  violation raises ``StoreError`` just like a duplicate key would.
"""

import copy
import math
import re
from datetime import datetime
from typing import Any, Optional

from bson import ObjectId

from .documents import COUNTERS, USERS, Document, DocumentStore, ENTITY_COLLECTIONS, Filter, Sort
from .errors import StoreError

_MISSING = object()

# collection -> fields that must be unique.  As with the MongoDB indexes,
# ``id`` only counts when numeric (partial index) while a missing email or
# username counts as null.
UNIQUE_FIELDS: dict[str, tuple[str, ...]] = {name: ("id",) for name in ENTITY_COLLECTIONS}
UNIQUE_FIELDS[USERS] = ("id", "email", "username")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _type_rank(value: Any) -> int:
    if value is _MISSING or value is None:
        return 1
    if isinstance(value, bool):
        return 8
    if _is_number(value):
        return 2
    if isinstance(value, str):
        return 3
    if isinstance(value, dict):
        return 4
    if isinstance(value, (list, tuple)):
        return 5
    if isinstance(value, bytes):
        return 6
    if isinstance(value, ObjectId):
        return 7
    if isinstance(value, datetime):
        return 9
    return 10


def _sort_key(value: Any) -> tuple:
    rank = _type_rank(value)
    if rank == 1:
        return (rank, 0)
    if rank == 2 and math.isnan(value):
        return (rank, -math.inf)
    if rank in (4, 5, 10):
        return (rank, repr(value))
    return (rank, value)


def _equals(actual: Any, expected: Any) -> bool:
    if actual is _MISSING:
        return expected is None
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _match_value(actual: Any, expected: Any) -> bool:
    if isinstance(expected, re.Pattern):
        return isinstance(actual, str) and expected.search(actual) is not None
    if isinstance(expected, dict) and expected and all(key.startswith("$") for key in expected):
        for operator, operand in expected.items():
            if operator == "$in":
                if not any(_match_value(actual, option) for option in operand):
                    return False
            elif operator == "$type":
                if operand != "number":
                    raise NotImplementedError(f"Unsupported $type {operand!r}")
                if actual is _MISSING or not _is_number(actual):
                    return False
            else:
                raise NotImplementedError(f"Unsupported query operator {operator}")
        return True
    return _equals(actual, expected)


def matches(document: Document, filter: Optional[Filter]) -> bool:
    """Return True if ``document`` satisfies the MongoDB-style ``filter``."""
    for key, expected in (filter or {}).items():
        if key == "$or":
            if not any(matches(document, clause) for clause in expected):
                return False
        elif not _match_value(document.get(key, _MISSING), expected):
            return False
    return True


def _index_key(document: Document, field: str) -> Any:
    value = document.get(field)
    if field == "id" and not _is_number(value):
        return _MISSING
    return value


def sort_documents(documents: list[Document], sort: Optional[Sort]) -> list[Document]:
    ordered = list(documents)
    # Stable sorts applied from the least significant key backwards.
    for field, direction in reversed(sort or []):
        ordered.sort(key=lambda doc: _sort_key(doc.get(field, _MISSING)), reverse=direction < 0)
    return ordered


class MemoryDocumentStore(DocumentStore):
    """Dictionary-backed implementation of ``DocumentStore``."""

    def __init__(self) -> None:
        self._collections: dict[str, list[Document]] = {}

    def _collection(self, name: str) -> list[Document]:
        return self._collections.setdefault(name, [])

    def _check_unique(self, collection: str, candidate: Document, skip: Optional[Document] = None) -> None:
        for field in UNIQUE_FIELDS.get(collection, ()):
            value = _index_key(candidate, field)
            if value is _MISSING:
                continue
            for existing in self._collection(collection):
                if existing is skip:
                    continue
                other = _index_key(existing, field)
                if other is not _MISSING and _equals(other, value):
                    raise StoreError(f"Duplicate key in {collection}: {field}={value!r}")

    async def find_one(
        self, collection: str, filter: Optional[Filter] = None, sort: Optional[Sort] = None
    ) -> Optional[Document]:
        found = await self.find(collection, filter, sort=sort, limit=1)
        return found[0] if found else None

    async def find(
        self,
        collection: str,
        filter: Optional[Filter] = None,
        sort: Optional[Sort] = None,
        limit: Optional[int] = None,
    ) -> list[Document]:
        results = [doc for doc in self._collection(collection) if matches(doc, filter)]
        results = sort_documents(results, sort)
        if limit:
            results = results[:limit]
        return copy.deepcopy(results)

    async def insert_one(self, collection: str, document: Document) -> Document:
        stored = copy.deepcopy(document)
        stored.setdefault("_id", ObjectId())
        self._check_unique(collection, stored)
        self._collection(collection).append(stored)
        return copy.deepcopy(stored)

    async def update_one(self, collection: str, filter: Filter, values: Document) -> Optional[Document]:
        for index, existing in enumerate(self._collection(collection)):
            if matches(existing, filter):
                updated = {**existing, **copy.deepcopy(values)}
                self._check_unique(collection, updated, skip=existing)
                self._collection(collection)[index] = updated
                return copy.deepcopy(updated)
        return None

    async def delete_one(self, collection: str, filter: Filter) -> bool:
        documents = self._collection(collection)
        for index, existing in enumerate(documents):
            if matches(existing, filter):
                del documents[index]
                return True
        return False

    async def increment(self, key: str, field: str = "seq", floor: int = 0) -> int:
        counters = self._collection(COUNTERS)
        counter = next((doc for doc in counters if doc.get("_id") == key), None)
        if counter is None:
            counter = {"_id": key, field: floor}
            counters.append(counter)
        counter[field] = max(counter.get(field, 0), floor) + 1
        return counter[field]
