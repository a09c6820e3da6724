"""
User endpoints for API v1.

All routes act on the authenticated user; passwords are never part of
a response.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from vendorhive_api.app.api.deps import get_storage
from vendorhive_api.app.core.security import get_current_user
from vendorhive_api.app.schemas.user import PasswordChange, User, UserPublic, UserUpdate
from vendorhive_api.app.services.user_service import UserService
from vendorhive_api.app.storage import Storage, StorageError


router = APIRouter()


@router.get("/me", response_model=UserPublic)
async def read_me(current_user: User = Depends(get_current_user)) -> UserPublic:
    return current_user.public()


@router.put("/me", response_model=UserPublic)
async def update_me(
    data: UserUpdate,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> UserPublic:
    """Update the current user's profile.

    Changing the e-mail or username to one already in use is a 400.
    """
    try:
        updated = await UserService.update_profile(storage, current_user, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return updated.public()


@router.put("/password")
async def change_password(
    data: PasswordChange,
    current_user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
) -> dict:
    try:
        changed = await UserService.change_password(storage, current_user, data)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not changed:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Current password is incorrect")
    return {"message": "Password updated successfully"}
