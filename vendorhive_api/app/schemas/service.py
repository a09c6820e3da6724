"""
Pydantic models for services offered by vendors.

Prices are free text ("from $50", "$30/hour") and are never parsed.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class TimeSlot(BaseModel):
    day: str = Field(..., examples=["monday"])
    start_time: str = Field(..., examples=["09:00"])
    end_time: str = Field(..., examples=["17:00"])


class ServiceBase(BaseModel):
    name: str = Field(..., min_length=2, examples=["Wedding bouquet"])
    category: str = Field(..., examples=["Flowers"])
    description: str = Field(..., min_length=10)
    price: str = Field(..., examples=["$120"])
    duration: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    time_slots: Optional[list[TimeSlot]] = None
    available_dates: Optional[list[str]] = None
    availability: bool = True


class ServiceCreate(ServiceBase):
    """Schema for creating a service.

    ``vendor_id`` is optional here because the HTTP layer fills it in
    from the caller's vendor profile; the repository rejects a service
    without one.
    """

    vendor_id: Optional[int] = None


class ServiceUpdate(BaseModel):
    """All fields optional; only the ones provided are changed."""

    name: Optional[str] = Field(None, min_length=2)
    category: Optional[str] = None
    description: Optional[str] = Field(None, min_length=10)
    price: Optional[str] = None
    duration: Optional[str] = None
    location: Optional[str] = None
    image_url: Optional[str] = None
    time_slots: Optional[list[TimeSlot]] = None
    available_dates: Optional[list[str]] = None
    availability: Optional[bool] = None


class Service(ServiceBase):
    id: int
    vendor_id: int
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }
