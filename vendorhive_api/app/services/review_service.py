"""
Business logic for reviews.

Customers review vendors; the repository keeps the vendor's rating and
review count in step with its reviews.
"""

import logging

from ..schemas.review import Review, ReviewCreate, ReviewWithUser
from ..schemas.user import User
from ..storage import Storage

logger = logging.getLogger(__name__)


class ReviewService:
    """Service for handling vendor reviews."""

    @classmethod
    async def create_review(cls, storage: Storage, current_user: User, data: ReviewCreate) -> Review:
        """Create a review written by the current user.

        Raises ``PermissionError`` if ``data.user_id`` is someone else
        and ``StorageValidationError`` for an out-of-range rating.
        """
        if data.user_id != current_user.id:
            raise PermissionError("You can only create reviews as yourself")
        review = await storage.create_review(data)
        logger.info("User %s reviewed vendor %s with %s stars", current_user.id, data.vendor_id, data.rating)
        return review

    @classmethod
    async def list_for_vendor(cls, storage: Storage, vendor_id: int) -> list[ReviewWithUser]:
        return await storage.get_reviews_by_vendor_id(vendor_id)
