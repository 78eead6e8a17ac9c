from datetime import date
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Enum, Date, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.landlord import Landlord
    from app.models.property import Property
    from app.models.tenant import Tenant


class PolicyStatus(str, PyEnum):
    """Policy lifecycle states (expired and cancelled are terminal)"""

    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class RiskDecision(str, PyEnum):
    """Outcome of the risk evaluation recorded at issuance"""

    ACCEPT = "accept"
    CONDITIONAL_ACCEPT = "conditional_accept"
    DECLINE = "decline"


class Policy(Base, TimestampMixin):
    """
    Rent guarantee policy covering one tenant of one property.

    Everything except status is fixed at issuance. end_date and
    premium_amount are derived from the inputs by app.services.derivation
    and are never accepted from callers.
    """

    __tablename__ = "policies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("landlords.id", ondelete="CASCADE"), nullable=False, index=True
    )
    property_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    tenant_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    policy_number: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[PolicyStatus] = mapped_column(
        Enum(PolicyStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=PolicyStatus.ACTIVE,
    )
    coverage_months: Mapped[int] = mapped_column(Integer, nullable=False)
    risk_score: Mapped[Decimal] = mapped_column(Numeric(precision=5, scale=2), nullable=False)
    decision: Mapped[RiskDecision] = mapped_column(
        Enum(RiskDecision, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    premium_amount: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)

    # Relationships
    landlord: Mapped["Landlord"] = relationship("Landlord")
    property: Mapped["Property"] = relationship("Property")
    tenant: Mapped["Tenant"] = relationship("Tenant")

    __table_args__ = (
        UniqueConstraint("policy_number", name="uq_policies_policy_number"),
        UniqueConstraint("tenant_id", name="uq_policies_tenant_id"),
        CheckConstraint("coverage_months >= 1", name="ck_policies_coverage_months"),
        CheckConstraint("risk_score >= 0 AND risk_score <= 100", name="ck_policies_risk_score"),
    )

    def __repr__(self) -> str:
        return f"<Policy(id={self.id}, policy_number='{self.policy_number}', status={self.status.value})>"
