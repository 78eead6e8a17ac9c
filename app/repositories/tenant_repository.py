"""Repository for rental Tenant model operations."""

from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.property import Property
from app.models.tenant import PaymentStatus, Tenant


class TenantRepository:
    """Repository for Tenant model operations scoped by owning user"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> list[Tenant]:
        return (
            self.db.query(Tenant)
            .filter(Tenant.user_id == user_id)
            .order_by(Tenant.created_at.desc(), Tenant.id.desc())
            .all()
        )

    def get_by_property(self, property_id: int, user_id: int) -> list[Tenant]:
        return (
            self.db.query(Tenant)
            .filter(Tenant.property_id == property_id, Tenant.user_id == user_id)
            .order_by(Tenant.created_at.desc(), Tenant.id.desc())
            .all()
        )

    def get_by_landlord(self, landlord_id: int, user_id: int) -> list[Tenant]:
        """
        Get tenants living in any property of the landlord.

        Joins with Property since tenants only reference their property.
        """
        return (
            self.db.query(Tenant)
            .join(Property, Tenant.property_id == Property.id)
            .filter(Property.landlord_id == landlord_id, Tenant.user_id == user_id)
            .order_by(Tenant.created_at.desc(), Tenant.id.desc())
            .all()
        )

    def get_by_id_and_user(
        self, tenant_id: int, user_id: int, for_update: bool = False
    ) -> Tenant | None:
        """
        Get tenant ensuring it belongs to user.

        Returns None if tenant doesn't exist or belongs to another user.
        """
        query = self.db.query(Tenant).filter(Tenant.id == tenant_id, Tenant.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def add(self, tenant: Tenant) -> Tenant:
        """Stage a new tenant and assign its id (no commit)"""
        self.db.add(tenant)
        self.db.flush()
        return tenant

    def count_for_property(self, property_id: int) -> int:
        return (
            self.db.query(func.count(Tenant.id))
            .filter(Tenant.property_id == property_id)
            .scalar()
        )

    def count_by_user(self, user_id: int) -> int:
        return self.db.query(Tenant).filter(Tenant.user_id == user_id).count()

    def total_paid_rent(self, user_id: int) -> Decimal:
        """Sum of rent for tenants whose current payment status is paid"""
        result = (
            self.db.query(func.sum(Tenant.rent_amount))
            .filter(Tenant.user_id == user_id, Tenant.payment_status == PaymentStatus.PAID)
            .scalar()
        )
        return Decimal(result) if result is not None else Decimal("0.00")

    def ids_for_properties(self, property_ids: list[int]) -> list[int]:
        if not property_ids:
            return []
        rows = self.db.query(Tenant.id).filter(Tenant.property_id.in_(property_ids)).all()
        return [row.id for row in rows]

    def delete_ids(self, tenant_ids: list[int]) -> int:
        """Delete tenants by id. Policies and claims must already be gone."""
        if not tenant_ids:
            return 0
        return self.db.query(Tenant).filter(Tenant.id.in_(tenant_ids)).delete()
