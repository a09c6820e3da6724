"""
Business logic for bookings.

The repository overwrites a booking's status unconditionally, so the
rules about who may move a booking where live here:

* the vendor of a booking may confirm, complete or cancel it;
* the customer may only cancel it;
* every move must also be allowed by ``BOOKING_TRANSITIONS``.
"""

import logging
from typing import Optional

from ..schemas.booking import Booking, BookingCreate, BookingStatus
from ..schemas.user import User
from ..storage import Storage, StorageValidationError, is_transition_allowed

logger = logging.getLogger(__name__)

VENDOR_STATUSES = frozenset({BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value, BookingStatus.CANCELLED.value})
CUSTOMER_STATUSES = frozenset({BookingStatus.CANCELLED.value})


class BookingService:
    """Service for creating bookings and moving them through their lifecycle."""

    @classmethod
    async def create_booking(cls, storage: Storage, current_user: User, data: BookingCreate) -> Booking:
        """Create a booking for the current user.

        Raises ``PermissionError`` if ``data.user_id`` is someone else.
        """
        if data.user_id != current_user.id:
            raise PermissionError("You can only create bookings for yourself")
        booking = await storage.create_booking(data)
        logger.info("User %s booked vendor %s (booking %s)", current_user.id, booking.vendor_id, booking.id)
        return booking

    @classmethod
    async def list_for_user(cls, storage: Storage, current_user: User) -> list[Booking]:
        return await storage.get_bookings_by_user_id(current_user.id)

    @classmethod
    async def list_for_vendor(cls, storage: Storage, current_user: User) -> Optional[list[Booking]]:
        vendor = await storage.get_vendor_by_user_id(current_user.id)
        if vendor is None:
            return None
        return await storage.get_bookings_by_vendor_id(vendor.id)

    @classmethod
    async def update_status(
        cls, storage: Storage, current_user: User, booking_id: int, status: str
    ) -> Optional[Booking]:
        """Move a booking to ``status`` on behalf of ``current_user``.

        Returns ``None`` if the booking does not exist.  Raises
        ``StorageValidationError`` for an unknown status or an illegal
        transition and ``PermissionError`` when the caller is not a
        party to the booking or may not set that status.
        """
        if status not in {s.value for s in BookingStatus}:
            raise StorageValidationError(f"Invalid status: {status!r}")
        booking = await storage.get_booking(booking_id)
        if booking is None:
            return None

        allowed: set[str] = set()
        if booking.user_id == current_user.id:
            allowed |= CUSTOMER_STATUSES
        vendor = await storage.get_vendor_by_user_id(current_user.id)
        if vendor is not None and vendor.id == booking.vendor_id:
            allowed |= VENDOR_STATUSES
        if not allowed:
            raise PermissionError("You can only update your own bookings")

        current = booking.status.value
        if status != current and status not in allowed:
            raise PermissionError(f"You may not set this booking to {status}")
        if not is_transition_allowed(current, status):
            raise StorageValidationError(f"Cannot change booking status from {current} to {status}")

        logger.info("User %s moving booking %s from %s to %s", current_user.id, booking_id, current, status)
        return await storage.update_booking_status(booking_id, status)
