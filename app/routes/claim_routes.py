from typing import Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_notifier
from app.models.claim import ClaimStatus
from app.models.user import User
from app.services.claim_service import ClaimService
from app.services.collaborators import Notifier
from app.services.projection_service import ProjectionService
from app.schemas.claim_schemas import (
    ClaimCreate,
    ClaimUpdate,
    ClaimResponse,
    ClaimListResponse,
    ClaimDetail,
)

router = APIRouter()


@router.post("/", response_model=ClaimResponse, status_code=status.HTTP_201_CREATED)
def create_claim(
    data: ClaimCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    File a claim.

    - The policy must belong to the authenticated user and be active
    - New claims start as pending and receive a claim_number
    """
    return ClaimService(db, notifier=notifier).create_claim(data, user)


@router.get("/", response_model=ClaimListResponse)
def list_claims(
    landlord_id: Optional[int] = Query(None, description="Filter by landlord ID"),
    policy_id: Optional[int] = Query(None, description="Filter by policy ID"),
    status_filter: Optional[ClaimStatus] = Query(None, alias="status", description="Filter by status"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List claims with policy number, landlord and tenant names (newest first)"""
    claims = ProjectionService(db).list_claims(
        user, landlord_id=landlord_id, policy_id=policy_id, status=status_filter
    )
    return ClaimListResponse(claims=claims, total=len(claims))


@router.get("/{claim_id}", response_model=ClaimDetail)
def get_claim(
    claim_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    return ProjectionService(db).get_claim_detail(claim_id, user)


@router.patch("/{claim_id}", response_model=ClaimResponse)
def update_claim(
    claim_id: int,
    data: ClaimUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
):
    """
    Update claim status, evidence links or notes.

    - pending -> under_review | approved | rejected
    - under_review -> approved | rejected
    - approved -> paid
    - policy_id and claim_number cannot change
    """
    return ClaimService(db, notifier=notifier).update_claim(claim_id, data, user)


@router.delete("/{claim_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_claim(
    claim_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Delete a claim that is not approved or paid"""
    ClaimService(db).delete_claim(claim_id, user)
