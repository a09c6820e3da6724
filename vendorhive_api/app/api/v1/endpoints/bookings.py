"""
Booking endpoints for API v1.

Customers book vendors for themselves; the vendor and the customer of
a booking may then move it through its lifecycle.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from vendorhive_api.app.api.deps import get_storage
from vendorhive_api.app.core.security import get_current_user, require_roles
from vendorhive_api.app.schemas.booking import Booking, BookingCreate, BookingStatusUpdate
from vendorhive_api.app.schemas.user import User
from vendorhive_api.app.services.booking_service import BookingService
from vendorhive_api.app.storage import Storage, StorageError


router = APIRouter()


@router.post("", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    data: BookingCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Booking:
    try:
        return await BookingService.create_booking(storage, current_user, data)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/user", response_model=List[Booking])
async def list_my_bookings(
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> List[Booking]:
    try:
        return await BookingService.list_for_user(storage, current_user)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/vendor", response_model=List[Booking])
async def list_vendor_bookings(
    current_user: User = Depends(require_roles("vendor")),
    storage: Storage = Depends(get_storage),
) -> List[Booking]:
    try:
        bookings = await BookingService.list_for_vendor(storage, current_user)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if bookings is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor profile not found")
    return bookings


@router.put("/{booking_id}/status", response_model=Booking)
async def update_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Booking:
    """Change the status of a booking.

    The vendor may confirm, complete or cancel; the customer may only
    cancel.  Unknown statuses and moves out of a final state are a 400.
    """
    try:
        booking = await BookingService.update_status(storage, current_user, booking_id, data.status)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking
