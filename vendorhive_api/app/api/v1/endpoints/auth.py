"""
Authentication endpoints for API v1.

Registration and login both answer with the public user record, a
bearer token and, for vendor accounts, the vendor profile.
"""

from fastapi import APIRouter, Depends, HTTPException, status

from vendorhive_api.app.api.deps import get_settings, get_storage
from vendorhive_api.app.core.config import Settings
from vendorhive_api.app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from vendorhive_api.app.services.user_service import UserService
from vendorhive_api.app.storage import Storage, StorageError


router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
    data: RegisterRequest,
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings),
) -> AuthResponse:
    """Register a new account.

    Supplying ``vendor`` data makes the account a vendor account and
    creates its vendor profile.  A taken e-mail or username is a 400.
    """
    try:
        return await UserService.register(storage, data, config)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.post("/login", response_model=AuthResponse)
async def login(
    data: LoginRequest,
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings),
) -> AuthResponse:
    try:
        response = await UserService.login(storage, data, config)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if response is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid email or password")
    return response
