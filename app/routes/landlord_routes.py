from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.services.landlord_service import LandlordService
from app.services.projection_service import ProjectionService
from app.services.property_service import PropertyService
from app.services.tenant_service import TenantService
from app.schemas.claim_schemas import ClaimListResponse
from app.schemas.landlord_schemas import (
    LandlordCreate,
    LandlordUpdate,
    LandlordResponse,
    LandlordListResponse,
)
from app.schemas.policy_schemas import PolicyListResponse
from app.schemas.property_schemas import PropertyListResponse
from app.schemas.tenant_schemas import TenantListResponse

router = APIRouter()


@router.post("/", response_model=LandlordResponse, status_code=status.HTTP_201_CREATED)
def create_landlord(
    data: LandlordCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Create a new landlord for the authenticated user"""
    return LandlordService(db).create_landlord(data, user)


@router.get("/", response_model=LandlordListResponse)
def list_landlords(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get all landlords of the authenticated user"""
    landlords = LandlordService(db).get_user_landlords(user)
    return LandlordListResponse(landlords=landlords, total=len(landlords))


@router.get("/{landlord_id}", response_model=LandlordResponse)
def get_landlord(
    landlord_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Get specific landlord details"""
    return LandlordService(db).get_landlord(landlord_id, user)


@router.patch("/{landlord_id}", response_model=LandlordResponse)
def update_landlord(
    landlord_id: int,
    data: LandlordUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Update landlord contact details (partial update)"""
    return LandlordService(db).update_landlord(landlord_id, data, user)


@router.delete("/{landlord_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_landlord(
    landlord_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Delete a landlord.

    - Cascades to properties, tenants, policies and claims in one transaction
    """
    LandlordService(db).delete_landlord(landlord_id, user)


@router.get("/{landlord_id}/properties", response_model=PropertyListResponse)
def list_landlord_properties(
    landlord_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    properties = PropertyService(db).get_properties(user, landlord_id=landlord_id)
    return PropertyListResponse(properties=properties, total=len(properties))


@router.get("/{landlord_id}/tenants", response_model=TenantListResponse)
def list_landlord_tenants(
    landlord_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    tenants = TenantService(db).get_tenants(user, landlord_id=landlord_id)
    return TenantListResponse(tenants=tenants, total=len(tenants))


@router.get("/{landlord_id}/policies", response_model=PolicyListResponse)
def list_landlord_policies(
    landlord_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Policies issued for any property of the landlord"""
    policies = ProjectionService(db).list_policies_for_landlord(landlord_id, user)
    return PolicyListResponse(policies=policies, total=len(policies))


@router.get("/{landlord_id}/claims", response_model=ClaimListResponse)
def list_landlord_claims(
    landlord_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Claims filed against any policy of the landlord"""
    claims = ProjectionService(db).list_claims_for_landlord(landlord_id, user)
    return ClaimListResponse(claims=claims, total=len(claims))
