from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.projection_service import ProjectionService
from app.services.tenant_service import TenantService
from app.schemas.policy_schemas import PolicyListResponse
from app.schemas.tenant_schemas import (
    TenantCreate,
    TenantUpdate,
    TenantResponse,
    TenantListResponse,
)

router = APIRouter()


@router.post("/", response_model=TenantResponse, status_code=status.HTTP_201_CREATED)
def create_tenant(
    data: TenantCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Add a tenant to a property.

    - Requires a property owned by the authenticated user with free capacity
    - lease_end must be on or after lease_start
    """
    return TenantService(db).create_tenant(data, user)


@router.get("/", response_model=TenantListResponse)
def list_tenants(
    property_id: Optional[int] = Query(None, description="Filter by property ID"),
    landlord_id: Optional[int] = Query(None, description="Filter by landlord ID"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tenants = TenantService(db).get_tenants(user, property_id=property_id, landlord_id=landlord_id)
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.get("/{tenant_id}", response_model=TenantResponse)
def get_tenant(
    tenant_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return TenantService(db).get_tenant(tenant_id, user)


@router.patch("/{tenant_id}", response_model=TenantResponse)
def update_tenant(
    tenant_id: int,
    data: TenantUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return TenantService(db).update_tenant(tenant_id, data, user)


@router.delete("/{tenant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tenant(
    tenant_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Delete a tenant together with its policy and that policy's claims"""
    TenantService(db).delete_tenant(tenant_id, user)


@router.get("/{tenant_id}/policies", response_model=PolicyListResponse)
def list_tenant_policies(
    tenant_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    policies = ProjectionService(db).list_policies_for_tenant(tenant_id, user)
    return PolicyListResponse(policies=policies, total=len(policies))
