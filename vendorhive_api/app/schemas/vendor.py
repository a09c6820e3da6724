"""
Pydantic models for vendor profiles.

``rating`` and ``review_count`` are derived from the vendor's reviews
and are maintained by the repository; no input schema accepts them.
"""

from typing import Any, Optional, Union

from pydantic import BaseModel, Field

from .service import Service
from .review import ReviewWithUser
from .user import UserPublic


class VendorBase(BaseModel):
    business_name: str = Field(..., min_length=2, examples=["Bloom & Petal"])
    category: str = Field(..., examples=["Florist"])
    description: str = Field(..., min_length=10)
    services: Optional[list[str]] = None
    business_hours: Optional[dict[str, Any]] = None
    cover_image: Optional[str] = None


class VendorCreate(VendorBase):
    """Schema for creating a vendor profile.

    ``user_id`` may be any user reference the resolver understands.
    """

    user_id: Union[int, str]


class VendorUpdate(BaseModel):
    business_name: Optional[str] = Field(None, min_length=2)
    category: Optional[str] = None
    description: Optional[str] = Field(None, min_length=10)
    services: Optional[list[str]] = None
    business_hours: Optional[dict[str, Any]] = None
    cover_image: Optional[str] = None


class Vendor(VendorBase):
    id: int
    # Legacy rows reference the owner by ObjectId or string; new rows
    # store the integer user id.
    user_id: Union[int, str, None] = None
    services: list[str] = []
    business_hours: dict[str, Any] = {}
    rating: int = 0
    review_count: int = 0

    model_config = {
        "from_attributes": True,
    }


class VendorWithUser(Vendor):
    user: UserPublic


class VendorProfile(VendorWithUser):
    """A vendor together with its service listings and reviews.

    ``services`` holds the full service documents here, not the
    vendor's free-text service tags.
    """

    services: list[Service] = []
    reviews: list[ReviewWithUser] = []
