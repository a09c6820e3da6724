"""
Pydantic schemas for vendor reviews.

Customers rate vendors from 1 to 5.  Each new review updates the
vendor's ``rating`` and ``review_count``.  The range is checked by the
repository, so an out-of-range rating is a 400 like every other
storage validation error.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .user import UserPublic


class ReviewCreate(BaseModel):
    """Schema for creating a new review."""

    user_id: int = Field(..., description="Author of the review")
    vendor_id: int = Field(..., description="Vendor being reviewed")
    rating: int = Field(..., description="Rating from 1 to 5")
    comment: Optional[str] = Field(None, description="Optional textual comment")

    @field_validator("comment")
    @classmethod
    def sanitize_comment(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace from the comment and enforce a maximum length."""
        if v is None:
            return None
        v = v.strip()
        if len(v) > 1000:
            raise ValueError("Comment must be 1000 characters or fewer")
        return v


class Review(BaseModel):
    id: int
    user_id: int
    vendor_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }


class ReviewWithUser(Review):
    """A review joined with its author."""

    user: UserPublic
