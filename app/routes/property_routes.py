from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.property_service import PropertyService
from app.services.tenant_service import TenantService
from app.schemas.property_schemas import (
    PropertyCreate,
    PropertyUpdate,
    PropertyResponse,
    PropertyListResponse,
)
from app.schemas.tenant_schemas import TenantListResponse

router = APIRouter()


@router.post("/", response_model=PropertyResponse, status_code=status.HTTP_201_CREATED)
def create_property(
    data: PropertyCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Create a property.

    - Requires a landlord owned by the authenticated user
    - Updates the landlord's property_count in the same transaction
    """
    return PropertyService(db).create_property(data, user)


@router.get("/", response_model=PropertyListResponse)
def list_properties(
    landlord_id: Optional[int] = Query(None, description="Filter by landlord ID"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    properties = PropertyService(db).get_properties(user, landlord_id=landlord_id)
    return PropertyListResponse(properties=properties, total=len(properties))


@router.get("/{property_id}", response_model=PropertyResponse)
def get_property(
    property_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return PropertyService(db).get_property(property_id, user)


@router.patch("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: int,
    data: PropertyUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Update a property (partial update).

    - Rent changes do not reprice policies already issued
    """
    return PropertyService(db).update_property(property_id, data, user)


@router.delete("/{property_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_property(
    property_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Delete a property with its tenants, their policies and claims"""
    PropertyService(db).delete_property(property_id, user)


@router.get("/{property_id}/tenants", response_model=TenantListResponse)
def list_property_tenants(
    property_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    tenants = TenantService(db).get_tenants(user, property_id=property_id)
    return TenantListResponse(tenants=tenants, total=len(tenants))
