"""
Vendor endpoints for API v1.

Browsing vendors is public; only a vendor may edit their own profile.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from vendorhive_api.app.api.deps import get_storage
from vendorhive_api.app.core.security import require_roles
from vendorhive_api.app.schemas.review import ReviewWithUser
from vendorhive_api.app.schemas.service import Service
from vendorhive_api.app.schemas.user import User
from vendorhive_api.app.schemas.vendor import Vendor, VendorProfile, VendorUpdate, VendorWithUser
from vendorhive_api.app.services.review_service import ReviewService
from vendorhive_api.app.services.vendor_service import VendorService
from vendorhive_api.app.storage import Storage, StorageError


router = APIRouter()


@router.get("", response_model=List[VendorWithUser])
async def list_vendors(
    search: Optional[str] = Query(None, description="Case-insensitive text to look for"),
    storage: Storage = Depends(get_storage),
) -> List[VendorWithUser]:
    """List all vendors, or those matching ``search``.

    The search looks at business name, category, description and the
    owner's name.
    """
    try:
        return await VendorService.list_vendors(storage, search)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.put("/me", response_model=Vendor)
async def update_my_vendor(
    data: VendorUpdate,
    current_user: User = Depends(require_roles("vendor")),
    storage: Storage = Depends(get_storage),
) -> Vendor:
    try:
        vendor = await VendorService.update_own(storage, current_user, data)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if vendor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor profile not found")
    return vendor


@router.get("/user/{user_ref}", response_model=Vendor)
async def get_vendor_for_user(user_ref: str, storage: Storage = Depends(get_storage)) -> Vendor:
    """Find the vendor profile of a user.

    ``user_ref`` may be the user's integer id or ObjectId.
    """
    try:
        vendor = await storage.get_vendor_by_user_id(user_ref)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if vendor is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found for this user")
    return vendor


@router.get("/{vendor_id}", response_model=VendorProfile)
async def get_vendor(vendor_id: int, storage: Storage = Depends(get_storage)) -> VendorProfile:
    """Return a vendor with its owner, services and reviews."""
    try:
        profile = await VendorService.get_profile(storage, vendor_id)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor not found")
    return profile


@router.get("/{vendor_id}/services", response_model=List[Service])
async def list_vendor_services(vendor_id: int, storage: Storage = Depends(get_storage)) -> List[Service]:
    try:
        return await storage.get_services_by_vendor_id(vendor_id)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/{vendor_id}/reviews", response_model=List[ReviewWithUser])
async def list_vendor_reviews(vendor_id: int, storage: Storage = Depends(get_storage)) -> List[ReviewWithUser]:
    try:
        return await ReviewService.list_for_vendor(storage, vendor_id)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
