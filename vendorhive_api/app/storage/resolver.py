"""
Resolution of user references.

Vendors created over the life of the data set point at their owner in
three different ways: the integer ``id``, the native ``ObjectId`` and,
in older rows, the ``id`` rendered as a string.  Authentication tokens
carry the integer ``id`` but clients also pass ObjectId strings in
URLs.  ``UserResolver`` accepts any of these and tries, in order:

1. ``native``: an ``ObjectId`` or 24-character hex string, by ``_id``;
2. ``numeric``: an int, integral float or integer string, by ``id``;
3. ``string``: ``str(ref)`` compared against ``id``;
4. ``fallback``: the most recently joined user.

The first hit wins.  The fallback only exists so legacy vendors with a
dangling owner still render; it is logged at WARNING every time it is
used and can be switched off per call or through
``STRICT_USER_RESOLUTION``.
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Optional

from bson import ObjectId

from .allocator import MAX_ID
from .documents import ASCENDING, DESCENDING, USERS, VENDORS, Document, DocumentStore

logger = logging.getLogger(__name__)

_OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")
_INTEGER = re.compile(r"[+-]?[0-9]+")

# Most recently joined first; ``_id`` breaks ties between users created
# in the same instant.
FALLBACK_ORDER = [("joined_at", DESCENDING), ("_id", DESCENDING)]


def as_object_id(ref: Any) -> Optional[ObjectId]:
    if isinstance(ref, ObjectId):
        return ref
    if isinstance(ref, str) and _OBJECT_ID.match(ref):
        return ObjectId(ref)
    return None


def as_numeric_id(ref: Any) -> Optional[int]:
    """Coerce ``ref`` to an integer ID without guessing.

    Booleans are rejected even though they are ints.  Strings must
    consist of ASCII digits only (surrounding whitespace is ignored).
    Values outside the signed 64-bit range cannot be stored and are
    rejected as well.
    """
    if isinstance(ref, bool):
        return None
    if isinstance(ref, float):
        if math.isnan(ref) or not ref.is_integer():
            return None
        ref = int(ref)
    elif isinstance(ref, str) and _INTEGER.fullmatch(ref.strip()):
        ref = int(ref.strip())
    if isinstance(ref, int) and -MAX_ID - 1 <= ref <= MAX_ID:
        return ref
    return None


@dataclass
class Resolution:
    """A resolved user and the strategy that found it."""

    user: Document
    strategy: str


class UserResolver:
    """Map heterogeneous user references onto user documents."""

    def __init__(self, store: DocumentStore, allow_fallback: bool = True) -> None:
        self._store = store
        self._allow_fallback = allow_fallback

    async def resolve(self, ref: Any, allow_fallback: Optional[bool] = None) -> Optional[Resolution]:
        """Resolve ``ref`` to a user.

        ``allow_fallback`` defaults to the resolver's configuration;
        passing ``True`` cannot override a resolver built in strict
        mode.  Returns ``None`` when nothing matches and either the
        fallback is disabled or there are no users at all.
        """
        fallback = self._allow_fallback if allow_fallback is None else allow_fallback and self._allow_fallback

        object_id = as_object_id(ref)
        if object_id is not None:
            logger.debug("Resolving user %r by native id", ref)
            user = await self._store.find_one(USERS, {"_id": object_id})
            if user is not None:
                return self._found(ref, user, "native")

        numeric = as_numeric_id(ref)
        if numeric is not None:
            logger.debug("Resolving user %r by numeric id", ref)
            user = await self._store.find_one(USERS, {"id": numeric})
            if user is not None:
                return self._found(ref, user, "numeric")

        if ref is not None:
            logger.debug("Resolving user %r by string id", ref)
            user = await self._store.find_one(USERS, {"id": str(ref)})
            if user is not None:
                return self._found(ref, user, "string")

        if not fallback:
            logger.debug("User %r not found", ref)
            return None

        user = await self._store.find_one(USERS, sort=FALLBACK_ORDER)
        if user is None:
            logger.debug("User %r not found and there are no users to fall back to", ref)
            return None
        logger.warning(
            "User %r not found; falling back to most recent user id=%s",
            ref,
            user.get("id"),
        )
        return Resolution(user=user, strategy="fallback")

    async def resolve_user(self, ref: Any, allow_fallback: Optional[bool] = None) -> Optional[Document]:
        resolution = await self.resolve(ref, allow_fallback=allow_fallback)
        return resolution.user if resolution else None

    async def find_vendor_for_user(self, ref: Any) -> Optional[Document]:
        """Return the vendor document owned by the user ``ref`` refers to.

        The user is resolved without fallback.  A vendor matches when its
        ``user_id`` equals the user's ``_id``, integer ``id`` or that
        ``id`` as a string.  When the user itself is unknown, vendors
        still pointing at the raw reference are found as well.
        """
        if ref is None:
            return None
        user = await self.resolve_user(ref, allow_fallback=False)
        if user is not None:
            candidates = [user["_id"]]
            if user.get("id") is not None:
                candidates += [user["id"], str(user["id"])]
        else:
            # Non-string references only match through their coercions.
            candidates = [ref] if isinstance(ref, str) else []
            for coerced in (as_numeric_id(ref), as_object_id(ref)):
                if coerced is not None and coerced not in candidates:
                    candidates.append(coerced)

        vendor = await self._store.find_one(
            VENDORS,
            {"user_id": {"$in": candidates}},
            sort=[("id", ASCENDING)],
        )
        if vendor is None:
            logger.debug("No vendor profile for user %r", ref)
        return vendor

    @staticmethod
    def _found(ref: Any, user: Document, strategy: str) -> Resolution:
        logger.debug("Resolved user %r to id=%s via %s", ref, user.get("id"), strategy)
        return Resolution(user=user, strategy=strategy)
