"""
Business logic for vendor profiles.
"""

import asyncio
import logging
from typing import Optional

from ..schemas.user import User
from ..schemas.vendor import Vendor, VendorProfile, VendorUpdate, VendorWithUser
from ..storage import Storage

logger = logging.getLogger(__name__)


class VendorService:
    """Listing, searching and editing vendor profiles."""

    @classmethod
    async def list_vendors(cls, storage: Storage, search: Optional[str] = None) -> list[VendorWithUser]:
        if search:
            return await storage.search_vendors(search)
        return await storage.get_all_vendors()

    @classmethod
    async def get_profile(cls, storage: Storage, vendor_id: int) -> Optional[VendorProfile]:
        """Return the vendor with its services and reviews, or ``None``.

        The three reads are independent and run concurrently.
        """
        vendor, services, reviews = await asyncio.gather(
            storage.get_vendor(vendor_id),
            storage.get_services_by_vendor_id(vendor_id),
            storage.get_reviews_by_vendor_id(vendor_id),
        )
        if vendor is None:
            return None
        return VendorProfile(
            **vendor.model_dump(exclude={"services", "user"}),
            user=vendor.user,
            services=services,
            reviews=reviews,
        )

    @classmethod
    async def update_own(cls, storage: Storage, current_user: User, data: VendorUpdate) -> Optional[Vendor]:
        vendor = await storage.get_vendor_by_user_id(current_user.id)
        if vendor is None:
            return None
        logger.info("User %s updating vendor profile %s", current_user.id, vendor.id)
        return await storage.update_vendor(vendor.id, data)
