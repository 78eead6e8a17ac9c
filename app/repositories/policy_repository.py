from typing import Optional
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.models.policy import Policy, PolicyStatus


class PolicyRepository:
    """Repository for Policy data access"""

    def __init__(self, db: Session):
        self.db = db

    def add(self, policy: Policy) -> Policy:
        """Stage a new policy and flush so unique constraints are checked now"""
        self.db.add(policy)
        self.db.flush()
        return policy

    def get_by_id_and_user(
        self, policy_id: int, user_id: int, for_update: bool = False
    ) -> Optional[Policy]:
        """
        Get policy by ID, ensuring it belongs to the user.

        Returns:
            Policy object or None if not found or owned by another user
        """
        query = self.db.query(Policy).filter(Policy.id == policy_id, Policy.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get_with_parties(self, policy_id: int, user_id: int) -> Optional[Policy]:
        """Get policy with tenant, property and landlord loaded in one query"""
        return (
            self.db.query(Policy)
            .options(
                joinedload(Policy.tenant),
                joinedload(Policy.property),
                joinedload(Policy.landlord),
            )
            .filter(Policy.id == policy_id, Policy.user_id == user_id)
            .first()
        )

    def list_with_parties(
        self,
        user_id: int,
        landlord_id: Optional[int] = None,
        tenant_id: Optional[int] = None,
        status: Optional[PolicyStatus] = None,
    ) -> list[Policy]:
        """
        List policies with parties eagerly loaded, newest first.

        Args:
            user_id: Owning user for isolation
            landlord_id: Optional landlord filter
            tenant_id: Optional tenant filter
            status: Optional status filter
        """
        query = (
            self.db.query(Policy)
            .options(
                joinedload(Policy.tenant),
                joinedload(Policy.property),
                joinedload(Policy.landlord),
            )
            .filter(Policy.user_id == user_id)
        )

        if landlord_id is not None:
            query = query.filter(Policy.landlord_id == landlord_id)
        if tenant_id is not None:
            query = query.filter(Policy.tenant_id == tenant_id)
        if status is not None:
            query = query.filter(Policy.status == status)

        return query.order_by(Policy.created_at.desc(), Policy.id.desc()).all()

    def get_by_tenant(self, tenant_id: int) -> Optional[Policy]:
        """Get the policy covering a tenant, whoever owns it"""
        return self.db.query(Policy).filter(Policy.tenant_id == tenant_id).first()

    def number_exists(self, policy_number: str) -> bool:
        return (
            self.db.query(Policy.id).filter(Policy.policy_number == policy_number).first()
            is not None
        )

    def count_by_user(self, user_id: int, status: Optional[PolicyStatus] = None) -> int:
        query = self.db.query(func.count(Policy.id)).filter(Policy.user_id == user_id)
        if status is not None:
            query = query.filter(Policy.status == status)
        return query.scalar()

    def ids_for_tenants(self, tenant_ids: list[int]) -> list[int]:
        if not tenant_ids:
            return []
        rows = self.db.query(Policy.id).filter(Policy.tenant_id.in_(tenant_ids)).all()
        return [row.id for row in rows]

    def delete_ids(self, policy_ids: list[int]) -> int:
        """Delete policies by id. Claims must already be gone."""
        if not policy_ids:
            return 0
        return self.db.query(Policy).filter(Policy.id.in_(policy_ids)).delete()

    def count_for_property(self, property_id: int) -> int:
        return (
            self.db.query(func.count(Policy.id)).filter(Policy.property_id == property_id).scalar()
        )
