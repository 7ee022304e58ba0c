"""
Role routes - role CRUD and role/permission grants
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hotel_booking.database import get_db
from hotel_booking.dependencies import get_role_service
from hotel_booking.models import User
from hotel_booking.schemas import (
    PermissionResponse, RoleCreate, RoleDetailResponse, RoleResponse, RoleUpdate,
)
from hotel_booking.security.auth import get_current_user
from hotel_booking.services.rbac_service import RoleService

router = APIRouter(prefix="/roles", tags=["Roles"])


def _detail(service: RoleService, actor: User, role) -> RoleDetailResponse:
    detail = RoleDetailResponse.model_validate(role)
    detail.permissions = [
        PermissionResponse.model_validate(p)
        for p in service.get_role_permissions(actor, role.id)
    ]
    return detail


@router.get("", response_model=List[RoleResponse])
def list_roles(
    hotel_id: Optional[int] = None,
    include_global: bool = True,
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    roles = service.list_roles(current_user, hotel_id, include_global)
    return [RoleResponse.model_validate(r) for r in roles]


@router.post("", response_model=RoleDetailResponse, status_code=201)
def create_role(
    data: RoleCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    role = service.create_role(
        current_user,
        name=data.name,
        hotel_id=data.hotel_id,
        description=data.description,
        permission_ids=data.permission_ids,
    )
    db.commit()
    return _detail(service, current_user, role)


@router.get("/{role_id}", response_model=RoleDetailResponse)
def get_role(
    role_id: int,
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    role = service.get_role(current_user, role_id)
    return _detail(service, current_user, role)


@router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: int,
    data: RoleUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    role = service.update_role(current_user, role_id, name=data.name, description=data.description)
    db.commit()
    return RoleResponse.model_validate(role)


@router.delete("/{role_id}", status_code=204)
def delete_role(
    role_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    service.delete_role(current_user, role_id)
    db.commit()


# ============== Grants ==============

@router.put("/{role_id}/permissions/{permission_id}")
def grant_permission(
    role_id: int,
    permission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    created = service.grant_permission(current_user, role_id, permission_id)
    db.commit()
    return {"role_id": role_id, "permission_id": permission_id, "created": created}


@router.delete("/{role_id}/permissions/{permission_id}")
def revoke_permission(
    role_id: int,
    permission_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: RoleService = Depends(get_role_service),
):
    removed = service.revoke_permission(current_user, role_id, permission_id)
    db.commit()
    return {"role_id": role_id, "permission_id": permission_id, "removed": removed}
