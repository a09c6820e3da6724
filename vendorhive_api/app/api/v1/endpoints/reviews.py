"""
Review endpoints for API v1.

Authenticated users review vendors.  Reading a vendor's reviews is
public and lives under ``/vendors/{id}/reviews``.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from vendorhive_api.app.api.deps import get_storage
from vendorhive_api.app.core.security import get_current_user
from vendorhive_api.app.schemas.review import Review, ReviewCreate
from vendorhive_api.app.schemas.user import User
from vendorhive_api.app.services.review_service import ReviewService
from vendorhive_api.app.storage import Storage, StorageError


router = APIRouter()


@router.post(
    "/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
)
async def create_review(
    data: ReviewCreate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> Review:
    """Create a new review for a vendor.

    The vendor's rating and review count are updated as part of the
    call.  A rating outside 1-5 is a 400.
    """
    try:
        return await ReviewService.create_review(storage, current_user, data)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
