from decimal import Decimal
from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models.claim import Claim, ClaimStatus
from app.models.policy import Policy


class ClaimRepository:
    """Repository for Claim data access"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, claim: Claim) -> Claim:
        """Stage a new claim and flush so unique constraints are checked now"""
        self.db.add(claim)
        self.db.flush()
        return claim

    def get_by_id_and_user(
        self, claim_id: int, user_id: int, for_update: bool = False
    ) -> Optional[Claim]:
        """
        Get claim by ID, ensuring it belongs to the user.

        Returns:
            Claim object or None if not found or owned by another user
        """
        query = self.db.query(Claim).filter(Claim.id == claim_id, Claim.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_with_policy(self, claim_id: int, user_id: int) -> Optional[Claim]:
        """Get claim with its policy and the policy's tenant loaded"""
        return (
            self.db.query(Claim)
            .options(joinedload(Claim.policy).joinedload(Policy.tenant))
            .filter(Claim.id == claim_id, Claim.user_id == user_id)
            .first()
        )

    def list_with_policy(
        self,
        user_id: int,
        landlord_id: Optional[int] = None,
        policy_id: Optional[int] = None,
        status: Optional[ClaimStatus] = None,
    ) -> list[Claim]:
        """
        List claims with policy, landlord and tenant eagerly loaded, newest first.

        Joins with Policy so claims can be filtered by landlord.
        """
        query = (
            self.db.query(Claim)
            .join(Policy, Claim.policy_id == Policy.id)
            .options(
                joinedload(Claim.policy).joinedload(Policy.landlord),
                joinedload(Claim.policy).joinedload(Policy.tenant),
            )
            .filter(Claim.user_id == user_id)
        )

        if landlord_id is not None:
            query = query.filter(Policy.landlord_id == landlord_id)
        if policy_id is not None:
            query = query.filter(Claim.policy_id == policy_id)
        if status is not None:
            query = query.filter(Claim.status == status)

        return query.order_by(Claim.created_at.desc(), Claim.id.desc()).all()

    def count_for_policy(self, policy_id: int) -> int:
        """Count claims referencing a policy, across every status"""
        return self.db.query(func.count(Claim.id)).filter(Claim.policy_id == policy_id).scalar()

    def number_exists(self, claim_number: str) -> bool:
        return (
            self.db.query(Claim.id).filter(Claim.claim_number == claim_number).first() is not None
        )

    def count_by_user(self, user_id: int, status: Optional[ClaimStatus] = None) -> int:
        query = self.db.query(func.count(Claim.id)).filter(Claim.user_id == user_id)
        if status is not None:
            query = query.filter(Claim.status == status)
        return query.scalar()

    def total_requested(self, user_id: int) -> Decimal:
        result = (
            self.db.query(func.sum(Claim.amount_requested))
            .filter(Claim.user_id == user_id)
            .scalar()
        )
        return Decimal(result) if result is not None else Decimal("0.00")

    def delete(self, claim: Claim) -> None:
        """Delete a single claim (no commit)"""
        self.db.delete(claim)
        self.db.flush()

    def delete_for_policies(self, policy_ids: list[int]) -> int:
        """Delete every claim referencing the given policies"""
        if not policy_ids:
            return 0
        return self.db.query(Claim).filter(Claim.policy_id.in_(policy_ids)).delete()
