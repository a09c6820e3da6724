"""
Pydantic models for bookings.

A booking ties a customer to a vendor and, optionally, to one of the
vendor's services on a given date.  ``status`` moves through the
``BookingStatus`` values; see ``BOOKING_TRANSITIONS`` in the storage
repository for the allowed moves.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class BookingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingCreate(BaseModel):
    """Schema for creating a booking."""

    user_id: int
    vendor_id: int
    service_id: Optional[int] = None
    date: datetime = Field(..., examples=["2025-09-01T10:00:00Z"])
    status: BookingStatus = BookingStatus.PENDING
    notes: Optional[str] = None


class BookingStatusUpdate(BaseModel):
    # Plain string so an unknown status reaches the repository and is
    # reported as a 400 rather than a 422.
    status: str


class Booking(BaseModel):
    id: int
    user_id: int
    vendor_id: int
    service_id: Optional[int] = None
    date: datetime
    status: BookingStatus = BookingStatus.PENDING
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }
