"""
Business logic for the services vendors offer.

Only the vendor that owns a service may change or delete it.  Creating
a service goes through ``Storage.create_service_for_user``, which
provisions a default vendor profile for vendor accounts that lack one.
"""

import logging
from typing import Optional

from ..schemas.service import Service, ServiceCreate, ServiceUpdate
from ..schemas.user import User
from ..storage import Storage

logger = logging.getLogger(__name__)


class CatalogService:
    """Service listings owned by vendors."""

    @classmethod
    async def create_service(cls, storage: Storage, current_user: User, data: ServiceCreate) -> Optional[Service]:
        logger.info("User %s creating service %r", current_user.id, data.name)
        return await storage.create_service_for_user(current_user.id, data)

    @classmethod
    async def list_own(cls, storage: Storage, current_user: User) -> Optional[list[Service]]:
        vendor = await storage.get_vendor_by_user_id(current_user.id)
        if vendor is None:
            return None
        return await storage.get_services_by_vendor_id(vendor.id)

    @classmethod
    async def _owned(cls, storage: Storage, current_user: User, service_id: int) -> Optional[Service]:
        """Return the service if the caller owns it.

        ``None`` means the service does not exist; ``LookupError`` means
        the caller has no vendor profile and ``PermissionError`` that
        the service belongs to another vendor.
        """
        service = await storage.get_service_by_id(service_id)
        if service is None:
            return None
        vendor = await storage.get_vendor_by_user_id(current_user.id)
        if vendor is None:
            raise LookupError("Vendor profile not found")
        if service.vendor_id != vendor.id:
            logger.warning("User %s tried to modify service %s of vendor %s", current_user.id, service_id, service.vendor_id)
            raise PermissionError("You can only modify your own services")
        return service

    @classmethod
    async def update_service(
        cls, storage: Storage, current_user: User, service_id: int, data: ServiceUpdate
    ) -> Optional[Service]:
        if await cls._owned(storage, current_user, service_id) is None:
            return None
        return await storage.update_service(service_id, data)

    @classmethod
    async def delete_service(cls, storage: Storage, current_user: User, service_id: int) -> bool:
        if await cls._owned(storage, current_user, service_id) is None:
            return False
        return await storage.delete_service(service_id)
