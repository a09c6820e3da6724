"""
Exceptions raised by the storage layer.

Not-found is deliberately absent: lookups and updates of a missing
entity return ``None`` (or ``False``/an empty list) instead of raising.
"""


class StorageError(Exception):
    """Base class for storage-layer failures."""


class StorageValidationError(StorageError, ValueError):
    """Malformed or out-of-domain input, raised before any write."""


class ResolutionExhausted(StorageError, LookupError):
    """No user could be resolved for a reference, not even by fallback."""

    def __init__(self, ref):
        super().__init__(f"User with ID {ref!r} not found and no fallback available")
        self.ref = ref


class StoreError(StorageError):
    """The backing store failed (connection, timeout, duplicate key)."""
