from typing import Optional
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, get_document_renderer, get_notifier, get_risk_scorer
from app.models.policy import PolicyStatus
from app.models.user import User
from app.services.collaborators import DocumentRenderer, Notifier, RiskScorer
from app.services.policy_service import PolicyService
from app.services.projection_service import ProjectionService
from app.schemas.policy_schemas import (
    PolicyCreate,
    PolicyStatusUpdate,
    PolicyResponse,
    PolicyListResponse,
    PolicyDetail,
)
from app.core.exceptions import CollaboratorUnavailableException

router = APIRouter()


@router.post("/", response_model=PolicyResponse, status_code=status.HTTP_201_CREATED)
def create_policy(
    data: PolicyCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    risk_scorer: Optional[RiskScorer] = Depends(get_risk_scorer),
):
    """
    Issue a policy.

    - Landlord, property and tenant must belong to the authenticated user
      and to each other
    - end_date and premium_amount are derived, policy_number is issued
    - A tenant can hold only one policy
    """
    service = PolicyService(db, notifier=notifier, risk_scorer=risk_scorer)
    return service.create_policy(data, user)


@router.get("/", response_model=PolicyListResponse)
def list_policies(
    landlord_id: Optional[int] = Query(None, description="Filter by landlord ID"),
    tenant_id: Optional[int] = Query(None, description="Filter by tenant ID"),
    status_filter: Optional[PolicyStatus] = Query(None, alias="status", description="Filter by status"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List policies with tenant, landlord and property names (newest first)"""
    policies = ProjectionService(db).list_policies(
        user, landlord_id=landlord_id, tenant_id=tenant_id, status=status_filter
    )
    return PolicyListResponse(policies=policies, total=len(policies))


@router.get("/{policy_id}", response_model=PolicyDetail)
def get_policy(
    policy_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """Policy detail with its tenant, property and landlord"""
    return ProjectionService(db).get_policy_detail(policy_id, user)


@router.patch("/{policy_id}/status", response_model=PolicyResponse)
def update_policy_status(
    policy_id: int,
    data: PolicyStatusUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """
    Change policy status.

    - active -> expired | cancelled; expired and cancelled are final
    - Returns 409 for any other transition
    """
    return PolicyService(db).update_policy_status(policy_id, data.status, user)


@router.delete("/{policy_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_policy(
    policy_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)
):
    """
    Delete a policy.

    - Returns 409 while any claim references the policy
    """
    PolicyService(db).delete_policy(policy_id, user)


@router.get("/{policy_id}/document")
def get_policy_document(
    policy_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    renderer: Optional[DocumentRenderer] = Depends(get_document_renderer),
):
    """Render the policy document from the resolved detail view"""
    if renderer is None:
        raise CollaboratorUnavailableException("Policy document rendering is not configured")

    detail = ProjectionService(db).get_policy_detail(policy_id, user)
    content = renderer.render(detail)
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={
            "Content-Disposition": f'inline; filename="policy-{detail.policy.policy_number}.pdf"'
        },
    )
