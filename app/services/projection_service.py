"""
Read-only, denormalized views over policies and claims.

Nothing here writes or enforces rules; views are built straight from the
store on every call.
"""

from typing import Optional
from sqlalchemy.orm import Session

from app.config import settings
from app.models.claim import Claim, ClaimStatus
from app.models.policy import Policy, PolicyStatus
from app.models.user import User
from app.repositories.claim_repository import ClaimRepository
from app.repositories.landlord_repository import LandlordRepository
from app.repositories.policy_repository import PolicyRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.tenant_repository import TenantRepository
from app.schemas.claim_schemas import ClaimDetail, ClaimListItem, ClaimResponse
from app.schemas.dashboard_schemas import DashboardSummary
from app.schemas.landlord_schemas import LandlordSummary
from app.schemas.policy_schemas import PolicyDetail, PolicyListItem, PolicyResponse, PolicySummary
from app.schemas.property_schemas import PropertySummary
from app.schemas.tenant_schemas import TenantSummary
from app.core.exceptions import NotFoundException


def _policy_row(policy: Policy) -> PolicyListItem:
    return PolicyListItem(
        **PolicyResponse.model_validate(policy).model_dump(),
        tenant_name=policy.tenant.name,
        landlord_name=policy.landlord.name,
        property_name=policy.property.name,
    )


def _claim_row(claim: Claim) -> ClaimListItem:
    return ClaimListItem(
        **ClaimResponse.model_validate(claim).model_dump(),
        policy_number=claim.policy.policy_number,
        landlord_name=claim.policy.landlord.name,
        tenant_name=claim.policy.tenant.name,
    )


class ProjectionService:
    """Builds list and detail views consumed by routes and document rendering"""

    def __init__(self, db: Session):
        self.db = db
        self.policy_repo = PolicyRepository(db)
        self.claim_repo = ClaimRepository(db)
        self.landlord_repo = LandlordRepository(db)
        self.property_repo = PropertyRepository(db)
        self.tenant_repo = TenantRepository(db)

    def list_policies(
        self,
        user: User,
        landlord_id: Optional[int] = None,
        tenant_id: Optional[int] = None,
        status: Optional[PolicyStatus] = None,
    ) -> list[PolicyListItem]:
        policies = self.policy_repo.list_with_parties(
            user.id, landlord_id=landlord_id, tenant_id=tenant_id, status=status
        )
        return [_policy_row(policy) for policy in policies]

    def list_policies_for_landlord(self, landlord_id: int, user: User) -> list[PolicyListItem]:
        """
        Raises:
            NotFoundException: If landlord not found or belongs to another user
        """
        if not self.landlord_repo.get_by_id_and_user(landlord_id, user.id):
            raise NotFoundException("Landlord not found")
        return self.list_policies(user, landlord_id=landlord_id)

    def list_policies_for_tenant(self, tenant_id: int, user: User) -> list[PolicyListItem]:
        """
        Raises:
            NotFoundException: If tenant not found or belongs to another user
        """
        if not self.tenant_repo.get_by_id_and_user(tenant_id, user.id):
            raise NotFoundException("Tenant not found")
        return self.list_policies(user, tenant_id=tenant_id)

    def get_policy_detail(self, policy_id: int, user: User) -> PolicyDetail:
        """
        Policy with its tenant, property and landlord.

        Raises:
            NotFoundException: If policy not found or belongs to another user
        """
        policy = self.policy_repo.get_with_parties(policy_id, user.id)
        if not policy:
            raise NotFoundException("Policy not found")
        return PolicyDetail(
            policy=PolicyResponse.model_validate(policy),
            tenant=TenantSummary.model_validate(policy.tenant),
            property=PropertySummary.model_validate(policy.property),
            landlord=LandlordSummary.model_validate(policy.landlord),
        )

    def list_claims(
        self,
        user: User,
        landlord_id: Optional[int] = None,
        policy_id: Optional[int] = None,
        status: Optional[ClaimStatus] = None,
    ) -> list[ClaimListItem]:
        claims = self.claim_repo.list_with_policy(
            user.id, landlord_id=landlord_id, policy_id=policy_id, status=status
        )
        return [_claim_row(claim) for claim in claims]

    def list_claims_for_landlord(self, landlord_id: int, user: User) -> list[ClaimListItem]:
        """
        Raises:
            NotFoundException: If landlord not found or belongs to another user
        """
        if not self.landlord_repo.get_by_id_and_user(landlord_id, user.id):
            raise NotFoundException("Landlord not found")
        return self.list_claims(user, landlord_id=landlord_id)

    def get_claim_detail(self, claim_id: int, user: User) -> ClaimDetail:
        """
        Raises:
            NotFoundException: If claim not found or belongs to another user
        """
        claim = self.claim_repo.get_with_policy(claim_id, user.id)
        if not claim:
            raise NotFoundException("Claim not found")
        return ClaimDetail(
            claim=ClaimResponse.model_validate(claim),
            policy=PolicySummary.model_validate(claim.policy),
            tenant=TenantSummary.model_validate(claim.policy.tenant),
        )

    def dashboard_summary(self, user: User) -> DashboardSummary:
        return DashboardSummary(
            landlords=self.landlord_repo.count_by_user(user.id),
            properties=self.property_repo.count_by_user(user.id),
            tenants=self.tenant_repo.count_by_user(user.id),
            policies=self.policy_repo.count_by_user(user.id),
            active_policies=self.policy_repo.count_by_user(user.id, status=PolicyStatus.ACTIVE),
            claims=self.claim_repo.count_by_user(user.id),
            pending_claims=self.claim_repo.count_by_user(user.id, status=ClaimStatus.PENDING),
            total_claim_amount=float(self.claim_repo.total_requested(user.id)),
            total_rent_collected=float(self.tenant_repo.total_paid_rent(user.id)),
            currency=settings.CURRENCY,
        )
