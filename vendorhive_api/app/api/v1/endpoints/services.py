"""
Service listing endpoints for API v1.

Vendors manage the services they offer here.  Public browsing of a
vendor's services lives under ``/vendors/{id}/services``.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from vendorhive_api.app.api.deps import get_storage
from vendorhive_api.app.core.security import require_roles
from vendorhive_api.app.schemas.service import Service, ServiceCreate, ServiceUpdate
from vendorhive_api.app.schemas.user import User
from vendorhive_api.app.services.catalog_service import CatalogService
from vendorhive_api.app.storage import Storage, StorageError


router = APIRouter()


@router.post("", response_model=Service, status_code=status.HTTP_201_CREATED)
async def create_service(
    data: ServiceCreate,
    current_user: User = Depends(require_roles("vendor")),
    storage: Storage = Depends(get_storage),
) -> Service:
    """Create a service for the caller's vendor profile.

    Any ``vendor_id`` in the body is ignored.  A vendor account without
    a profile gets a default one first.
    """
    try:
        service = await CatalogService.create_service(storage, current_user, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Vendor profile not found and user is not a vendor",
        )
    return service


@router.get("/vendor", response_model=List[Service])
async def list_my_services(
    current_user: User = Depends(require_roles("vendor")),
    storage: Storage = Depends(get_storage),
) -> List[Service]:
    try:
        services = await CatalogService.list_own(storage, current_user)
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if services is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Vendor profile not found")
    return services


@router.put("/{service_id}", response_model=Service)
async def update_service(
    service_id: int,
    data: ServiceUpdate,
    current_user: User = Depends(require_roles("vendor")),
    storage: Storage = Depends(get_storage),
) -> Service:
    try:
        service = await CatalogService.update_service(storage, current_user, service_id, data)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if service is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return service


@router.delete("/{service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service(
    service_id: int,
    current_user: User = Depends(require_roles("vendor")),
    storage: Storage = Depends(get_storage),
) -> None:
    try:
        deleted = await CatalogService.delete_service(storage, current_user, service_id)
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StorageError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")
    return None
