"""
Permission routes - the global (action, resource) catalogue
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_permission_service
from hotel_booking.models import User
from hotel_booking.schemas import (
    PermissionCreate, PermissionResponse, PermissionUpdate, RoleResponse,
)
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.rbac_service import PermissionService

router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("", response_model=List[PermissionResponse])
def list_permissions(
    resource: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    return [PermissionResponse.model_validate(p) for p in service.list_permissions(current_user, resource)]


@router.post("", response_model=PermissionResponse, status_code=201)
def create_permission(
    data: PermissionCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    permission = service.create_permission(
        current_user, data.action, data.resource, name=data.name, description=data.description,
    )
    db.commit()
    return PermissionResponse.model_validate(permission)


@router.get("/{permission_id}", response_model=PermissionResponse)
def get_permission(
    permission_id: int,
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    return PermissionResponse.model_validate(service.get_permission(current_user, permission_id))


@router.get("/{permission_id}/roles", response_model=List[RoleResponse])
def get_permission_roles(
    permission_id: int,
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    roles = service.get_permission_roles(current_user, permission_id)
    return [RoleResponse.model_validate(r) for r in roles]


@router.put("/{permission_id}", response_model=PermissionResponse)
def update_permission(
    permission_id: int,
    data: PermissionUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    permission = service.update_permission(current_user, permission_id, **data.model_dump(exclude_unset=True))
    db.commit()
    return PermissionResponse.model_validate(permission)


@router.delete("/{permission_id}", status_code=204)
def delete_permission(
    permission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: PermissionService = Depends(get_permission_service),
):
    service.delete_permission(current_user, permission_id)
    db.commit()
