"""
Health check endpoint for API v1.

Reports whether the storage backend answers a trivial query.  Publicly
accessible so load balancers can probe it without a token.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from vendorhive_api.app.api.deps import get_settings, get_storage
from vendorhive_api.app.core.config import Settings
from vendorhive_api.app.storage import Storage, StoreError
from vendorhive_api.app.storage.documents import USERS

router = APIRouter()


@router.get("", response_model=Dict[str, Any])
async def health(
    storage: Storage = Depends(get_storage),
    config: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    try:
        await storage.store.find_one(USERS)
    except StoreError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))
    return {"status": "ok", "storage": config.storage_backend, "version": config.api_version}
