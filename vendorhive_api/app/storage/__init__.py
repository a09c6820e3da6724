"""
Storage layer: entity repository plus interchangeable backends.

``MemStorage`` keeps everything in process and is what tests and local
development use; ``MongoStorage`` persists to MongoDB.  Both are
``Storage`` subclasses with identical behaviour.  The application
builds exactly one of them at startup with ``create_storage`` and
injects it where needed.
"""

from ..core.config import Settings
from .errors import ResolutionExhausted, StorageError, StorageValidationError, StoreError
from .memory import MemoryDocumentStore
from .mongo import MongoDocumentStore
from .repository import BOOKING_TRANSITIONS, Storage, is_transition_allowed, round_half_up

__all__ = [
    "BOOKING_TRANSITIONS",
    "MemStorage",
    "MongoStorage",
    "ResolutionExhausted",
    "Storage",
    "StorageError",
    "StorageValidationError",
    "StoreError",
    "create_storage",
    "is_transition_allowed",
    "round_half_up",
]


class MemStorage(Storage):
    """``Storage`` over a fresh in-process document store."""

    def __init__(self, **options) -> None:
        super().__init__(MemoryDocumentStore(), **options)


class MongoStorage(Storage):
    """``Storage`` over a MongoDB database.

    Call ``connect()`` before use so the indexes exist.
    """

    def __init__(self, uri: str, database: str, timeout_ms: int = 5000, **options) -> None:
        super().__init__(MongoDocumentStore(uri, database, timeout_ms), **options)


def create_storage(settings: Settings) -> Storage:
    """Build the storage facade selected by ``settings.storage_backend``."""
    options = {
        "id_strategy": settings.id_strategy,
        "strict_user_resolution": settings.strict_user_resolution,
        "enforce_booking_transitions": settings.enforce_booking_transitions,
    }
    backend = settings.storage_backend.lower()
    if backend == "memory":
        return MemStorage(**options)
    if backend in ("mongodb", "mongo"):
        return MongoStorage(
            settings.mongodb_uri,
            settings.mongodb_database,
            timeout_ms=settings.mongodb_timeout_ms,
            **options,
        )
    raise ValueError(f"Unknown storage backend {settings.storage_backend!r}; expected 'memory' or 'mongodb'")
