"""
Entity repository for the VendorHive marketplace.

``Storage`` implements every read and write the application performs
on users, vendors, services, bookings and reviews.  It is written
against the ``DocumentStore`` protocol only, so the in-memory and
MongoDB backends share one implementation and behave identically.

New integer IDs come from ``IdAllocator``; foreign user references go
through ``UserResolver``.  A vendor's ``rating`` and ``review_count``
are recomputed from its full review set whenever a review is added.
Lookups of missing entities return ``None``, ``False`` or an empty
list; malformed input raises ``StorageValidationError`` before
anything is written.
"""

import logging
import math
import re
from datetime import datetime, timezone
from typing import Any, Optional, Type, TypeVar

from bson import ObjectId
from pydantic import BaseModel

from ..schemas.booking import Booking, BookingCreate, BookingStatus
from ..schemas.review import Review, ReviewCreate, ReviewWithUser
from ..schemas.service import Service, ServiceCreate, ServiceUpdate
from ..schemas.user import User, UserCreate, UserPublic, UserUpdate
from ..schemas.vendor import Vendor, VendorCreate, VendorUpdate, VendorWithUser
from .allocator import IdAllocator, coerce_id
from .documents import ASCENDING, BOOKINGS, REVIEWS, SERVICES, USERS, VENDORS, Document, DocumentStore, Filter
from .errors import ResolutionExhausted, StorageValidationError
from .resolver import UserResolver

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

BY_ID = [("id", ASCENDING)]

BOOKING_STATUSES = frozenset(status.value for status in BookingStatus)

# Allowed status moves.  Completed and cancelled bookings are final.
BOOKING_TRANSITIONS: dict[str, frozenset[str]] = {
    BookingStatus.PENDING.value: frozenset({BookingStatus.CONFIRMED.value, BookingStatus.CANCELLED.value}),
    BookingStatus.CONFIRMED.value: frozenset({BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value}),
    BookingStatus.COMPLETED.value: frozenset(),
    BookingStatus.CANCELLED.value: frozenset(),
}

DEFAULT_VENDOR_CATEGORY = "General Services"
DEFAULT_VENDOR_DESCRIPTION = "A new vendor on VendorHive"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    ``round()`` rounds halves to even, which would turn an average of
    2.5 into 2.
    """
    return math.floor(value + 0.5)


def is_transition_allowed(current: Optional[str], new: str) -> bool:
    if current == new:
        return True
    return new in BOOKING_TRANSITIONS.get(current or "", frozenset())


def default_business_name(name: Optional[str]) -> str:
    return f"{name}'s Business" if name else "New Business"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _plain(document: Document) -> dict[str, Any]:
    """Strip ``_id`` and ``None`` values and render ObjectIds as strings."""
    return {
        key: str(value) if isinstance(value, ObjectId) else value
        for key, value in document.items()
        if key != "_id" and value is not None
    }


def _load(model: Type[ModelT], document: Document, **extra: Any) -> ModelT:
    return model.model_validate({**_plain(document), **extra})


def _load_user(model: Type[ModelT], document: Document) -> ModelT:
    data = _plain(document)
    # Users inserted without an integer id are addressed by their ObjectId.
    data.setdefault("id", str(document["_id"]))
    return model.model_validate(data)


def _changes(data: BaseModel) -> dict[str, Any]:
    return data.model_dump(exclude_unset=True, exclude_none=True)


def _id_filter(value: Any, field: str = "id") -> Optional[Filter]:
    """Equality filter on an integer ID, or ``None`` for an ID no document can have."""
    key = coerce_id(value)
    return {field: key} if key is not None else None


class Storage:
    """Repository over a ``DocumentStore`` backend.

    Parameters
    ----------
    store : DocumentStore
        Backend holding the collections.
    id_strategy : str
        ``max`` or ``counter``; see ``IdAllocator``.
    strict_user_resolution : bool
        Disable the most-recent-user fallback of the resolver.
    enforce_booking_transitions : bool
        Reject booking status moves outside ``BOOKING_TRANSITIONS``
        instead of overwriting unconditionally.
    """

    def __init__(
        self,
        store: DocumentStore,
        id_strategy: str = "max",
        strict_user_resolution: bool = False,
        enforce_booking_transitions: bool = False,
    ) -> None:
        self.store = store
        self.ids = IdAllocator(store, id_strategy)
        self.users = UserResolver(store, allow_fallback=not strict_user_resolution)
        self.enforce_booking_transitions = enforce_booking_transitions

    async def connect(self) -> None:
        await self.store.connect()

    async def close(self) -> None:
        await self.store.close()

    async def _update(self, collection: str, filter: Filter, values: dict[str, Any]) -> Optional[Document]:
        if not values:
            return await self.store.find_one(collection, filter)
        return await self.store.update_one(collection, filter, values)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def get_user(self, ref: Any) -> Optional[User]:
        """Look a user up by integer id, numeric string or ObjectId string."""
        document = await self.users.resolve_user(ref, allow_fallback=False)
        return _load_user(User, document) if document else None

    async def get_user_by_email(self, email: str) -> Optional[User]:
        document = await self.store.find_one(USERS, {"email": email})
        return _load_user(User, document) if document else None

    async def get_user_by_username(self, username: str) -> Optional[User]:
        document = await self.store.find_one(USERS, {"username": username})
        return _load_user(User, document) if document else None

    async def create_user(self, data: UserCreate) -> User:
        document = data.model_dump(exclude_none=True)
        document["id"] = await self.ids.next_id(USERS)
        document["joined_at"] = _utcnow()
        stored = await self.store.insert_one(USERS, document)
        logger.info("Created user %s (%s) with role %s", stored["id"], stored["username"], stored["role"])
        return _load_user(User, stored)

    async def update_user(self, ref: Any, data: UserUpdate) -> Optional[User]:
        user = await self.users.resolve_user(ref, allow_fallback=False)
        if user is None:
            return None
        updated = await self._update(USERS, {"_id": user["_id"]}, _changes(data))
        return _load_user(User, updated) if updated else None

    # ------------------------------------------------------------------
    # Vendors
    # ------------------------------------------------------------------

    async def _with_user(self, vendor: Document) -> Optional[VendorWithUser]:
        resolution = await self.users.resolve(vendor.get("user_id"))
        if resolution is None:
            logger.warning("No user found for vendor %s with user_id %r", vendor.get("id"), vendor.get("user_id"))
            return None
        return _load(VendorWithUser, vendor, user=_load_user(UserPublic, resolution.user))

    async def get_vendor(self, vendor_id: int) -> Optional[VendorWithUser]:
        filter = _id_filter(vendor_id)
        vendor = await self.store.find_one(VENDORS, filter) if filter else None
        if vendor is None:
            return None
        return await self._with_user(vendor)

    async def get_vendor_by_user_id(self, ref: Any) -> Optional[Vendor]:
        vendor = await self.users.find_vendor_for_user(ref)
        return _load(Vendor, vendor) if vendor else None

    async def create_vendor(self, data: VendorCreate) -> Vendor:
        """Create a vendor profile for the user ``data.user_id`` refers to.

        The owner is resolved through the full cascade, so an unknown
        reference binds to the most recently joined user unless strict
        resolution is configured.  The stored ``user_id`` is always the
        resolved user's integer id.

        Raises
        ------
        ResolutionExhausted
            If no user can be resolved.
        """
        resolution = await self.users.resolve(data.user_id)
        if resolution is None:
            raise ResolutionExhausted(data.user_id)
        owner = resolution.user
        if resolution.strategy == "fallback":
            logger.warning(
                "Vendor %r bound to fallback user %s instead of %r",
                data.business_name,
                owner.get("id"),
                data.user_id,
            )

        document = data.model_dump(exclude={"user_id"}, exclude_none=True)
        document.setdefault("services", [])
        document.setdefault("business_hours", {})
        document["id"] = await self.ids.next_id(VENDORS)
        owner_id = coerce_id(owner.get("id"))
        document["user_id"] = owner_id if owner_id is not None else owner["_id"]
        document["rating"] = 0
        document["review_count"] = 0
        stored = await self.store.insert_one(VENDORS, document)
        logger.info("Created vendor %s for user %s", stored["id"], stored["user_id"])
        return _load(Vendor, stored)

    async def update_vendor(self, vendor_id: int, data: VendorUpdate) -> Optional[Vendor]:
        filter = _id_filter(vendor_id)
        if filter is None:
            return None
        updated = await self._update(VENDORS, filter, _changes(data))
        return _load(Vendor, updated) if updated else None

    async def get_all_vendors(self) -> list[VendorWithUser]:
        results = []
        for vendor in await self.store.find(VENDORS, sort=BY_ID):
            joined = await self._with_user(vendor)
            if joined is not None:
                results.append(joined)
        return results

    async def search_vendors(self, query: str) -> list[VendorWithUser]:
        """Case-insensitive substring search over vendors and owner names.

        ``query`` is matched literally.  Vendors whose business name,
        category or description match come first, followed by vendors
        whose owner's name matches; each vendor appears once.
        """
        if not query:
            return await self.get_all_vendors()
        pattern = re.compile(re.escape(query), re.IGNORECASE)

        results: list[VendorWithUser] = []
        seen: set[Any] = set()
        vendors = await self.store.find(
            VENDORS,
            {"$or": [{"business_name": pattern}, {"category": pattern}, {"description": pattern}]},
            sort=BY_ID,
        )
        for vendor in vendors:
            joined = await self._with_user(vendor)
            if joined is not None and joined.id not in seen:
                seen.add(joined.id)
                results.append(joined)

        for user in await self.store.find(USERS, {"name": pattern}, sort=BY_ID):
            keys = [user["_id"]]
            if user.get("id") is not None:
                keys += [user["id"], str(user["id"])]
            vendor = await self.store.find_one(VENDORS, {"user_id": {"$in": keys}}, sort=BY_ID)
            if vendor is not None and vendor.get("id") not in seen:
                seen.add(vendor.get("id"))
                results.append(_load(VendorWithUser, vendor, user=_load_user(UserPublic, user)))

        logger.debug("Vendor search %r returned %d results", query, len(results))
        return results

    # ------------------------------------------------------------------
    # Services
    # ------------------------------------------------------------------

    async def create_service(self, data: ServiceCreate) -> Service:
        vendor_id = coerce_id(data.vendor_id)
        if vendor_id is None:
            raise StorageValidationError(f"Invalid vendor ID: {data.vendor_id!r}")
        document = data.model_dump(exclude_none=True)
        document["vendor_id"] = vendor_id
        document["id"] = await self.ids.next_id(SERVICES)
        document["created_at"] = _utcnow()
        stored = await self.store.insert_one(SERVICES, document)
        logger.info("Created service %s for vendor %s", stored["id"], vendor_id)
        return _load(Service, stored)

    async def create_service_for_user(self, user_ref: Any, data: ServiceCreate) -> Optional[Service]:
        """Create a service under the vendor profile of ``user_ref``.

        A user with the ``vendor`` role but no profile (registration
        failed half way, or the data predates profiles) gets a default
        profile first.  Returns ``None`` when the user is unknown or is
        not a vendor.
        """
        vendor = await self.users.find_vendor_for_user(user_ref)
        if vendor is None:
            user = await self.users.resolve_user(user_ref, allow_fallback=False)
            if user is None or user.get("role") != "vendor":
                logger.info("User %r has no vendor profile and is not a vendor", user_ref)
                return None
            logger.info("User %r has the vendor role but no profile; creating a default one", user_ref)
            created = await self.create_vendor(
                VendorCreate(
                    user_id=user.get("id") if user.get("id") is not None else str(user["_id"]),
                    business_name=default_business_name(user.get("name")),
                    category=DEFAULT_VENDOR_CATEGORY,
                    description=DEFAULT_VENDOR_DESCRIPTION,
                )
            )
            vendor_id = created.id
        else:
            vendor_id = vendor.get("id")
        return await self.create_service(data.model_copy(update={"vendor_id": vendor_id}))

    async def get_service_by_id(self, service_id: int) -> Optional[Service]:
        filter = _id_filter(service_id)
        service = await self.store.find_one(SERVICES, filter) if filter else None
        return _load(Service, service) if service else None

    async def get_services_by_vendor_id(self, vendor_id: int) -> list[Service]:
        filter = _id_filter(vendor_id, "vendor_id")
        if filter is None:
            return []
        services = await self.store.find(SERVICES, filter, sort=BY_ID)
        return [_load(Service, service) for service in services]

    async def update_service(self, service_id: int, data: ServiceUpdate) -> Optional[Service]:
        filter = _id_filter(service_id)
        if filter is None:
            return None
        updated = await self._update(SERVICES, filter, _changes(data))
        return _load(Service, updated) if updated else None

    async def delete_service(self, service_id: int) -> bool:
        filter = _id_filter(service_id)
        if filter is None:
            return False
        deleted = await self.store.delete_one(SERVICES, filter)
        if deleted:
            logger.info("Deleted service %s", service_id)
        return deleted

    # ------------------------------------------------------------------
    # Bookings
    # ------------------------------------------------------------------

    async def create_booking(self, data: BookingCreate) -> Booking:
        if coerce_id(data.user_id) is None:
            raise StorageValidationError(f"Invalid user ID: {data.user_id!r}")
        vendor_id = coerce_id(data.vendor_id)
        if vendor_id is None:
            raise StorageValidationError(f"Invalid vendor ID: {data.vendor_id!r}")
        document = data.model_dump(exclude_none=True)
        if data.service_id is not None:
            service_id = coerce_id(data.service_id)
            if service_id is None:
                raise StorageValidationError(f"Invalid service ID: {data.service_id!r}")
            document["service_id"] = service_id
        document["vendor_id"] = vendor_id
        document["status"] = BookingStatus(data.status).value
        if data.date.tzinfo is None:
            document["date"] = data.date.replace(tzinfo=timezone.utc)
        document["id"] = await self.ids.next_id(BOOKINGS)
        document["created_at"] = _utcnow()
        stored = await self.store.insert_one(BOOKINGS, document)
        logger.info("Created booking %s for user %s with vendor %s", stored["id"], stored["user_id"], vendor_id)
        return _load(Booking, stored)

    async def get_booking(self, booking_id: int) -> Optional[Booking]:
        filter = _id_filter(booking_id)
        booking = await self.store.find_one(BOOKINGS, filter) if filter else None
        return _load(Booking, booking) if booking else None

    async def get_bookings_by_user_id(self, user_id: Any) -> list[Booking]:
        filter = _id_filter(user_id, "user_id")
        if filter is None:
            return []
        bookings = await self.store.find(BOOKINGS, filter, sort=BY_ID)
        return [_load(Booking, booking) for booking in bookings]

    async def get_bookings_by_vendor_id(self, vendor_id: int) -> list[Booking]:
        filter = _id_filter(vendor_id, "vendor_id")
        if filter is None:
            return []
        bookings = await self.store.find(BOOKINGS, filter, sort=BY_ID)
        return [_load(Booking, booking) for booking in bookings]

    async def update_booking_status(self, booking_id: int, status: str) -> Optional[Booking]:
        """Set the status of a booking.

        Any status in ``BookingStatus`` is written as-is unless the
        repository was built with ``enforce_booking_transitions``, in
        which case moves outside ``BOOKING_TRANSITIONS`` are rejected.
        """
        status = status.value if isinstance(status, BookingStatus) else status
        if status not in BOOKING_STATUSES:
            raise StorageValidationError(f"Invalid status: {status!r}")
        filter = _id_filter(booking_id)
        if filter is None:
            return None
        if self.enforce_booking_transitions:
            booking = await self.store.find_one(BOOKINGS, filter)
            if booking is None:
                return None
            if not is_transition_allowed(booking.get("status"), status):
                raise StorageValidationError(
                    f"Cannot change booking status from {booking.get('status')!r} to {status!r}"
                )
        updated = await self.store.update_one(BOOKINGS, filter, {"status": status})
        if updated is None:
            return None
        logger.info("Booking %s status set to %s", booking_id, status)
        return _load(Booking, updated)

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    async def _ratings(self, vendor_id: int) -> list[float]:
        filter = _id_filter(vendor_id, "vendor_id")
        if filter is None:
            return []
        reviews = await self.store.find(REVIEWS, filter)
        return [
            review["rating"]
            for review in reviews
            if isinstance(review.get("rating"), (int, float)) and not isinstance(review.get("rating"), bool)
        ]

    async def create_review(self, data: ReviewCreate) -> Review:
        rating = data.rating
        if isinstance(rating, bool) or not isinstance(rating, (int, float)) or not 1 <= rating <= 5:
            raise StorageValidationError(f"Rating must be between 1 and 5, got {rating!r}")
        if coerce_id(data.user_id) is None:
            raise StorageValidationError(f"Invalid user ID: {data.user_id!r}")
        vendor_id = coerce_id(data.vendor_id)
        if vendor_id is None:
            raise StorageValidationError(f"Invalid vendor ID: {data.vendor_id!r}")

        document = data.model_dump(exclude_none=True)
        document["vendor_id"] = vendor_id
        document["id"] = await self.ids.next_id(REVIEWS)
        document["created_at"] = _utcnow()
        stored = await self.store.insert_one(REVIEWS, document)
        logger.info("Created review %s for vendor %s", stored["id"], vendor_id)

        ratings = await self._ratings(vendor_id)
        average = round_half_up(sum(ratings) / len(ratings))
        vendor = await self.store.update_one(
            VENDORS,
            {"id": vendor_id},
            {"rating": average, "review_count": len(ratings)},
        )
        if vendor is None:
            logger.warning("Review %s refers to missing vendor %s; rating not updated", stored["id"], vendor_id)
        else:
            logger.info("Updated vendor %s rating to %s (%d reviews)", vendor_id, average, len(ratings))
        return _load(Review, stored)

    async def get_reviews_by_vendor_id(self, vendor_id: int) -> list[ReviewWithUser]:
        filter = _id_filter(vendor_id, "vendor_id")
        if filter is None:
            return []
        results = []
        for review in await self.store.find(REVIEWS, filter, sort=BY_ID):
            author = await self.users.resolve_user(review.get("user_id"), allow_fallback=False)
            if author is None:
                continue
            results.append(_load(ReviewWithUser, review, user=_load_user(UserPublic, author)))
        return results

    async def get_average_rating_by_vendor_id(self, vendor_id: int) -> int:
        ratings = await self._ratings(vendor_id)
        if not ratings:
            return 0
        return round_half_up(sum(ratings) / len(ratings))
