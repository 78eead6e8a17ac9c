from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Enum, Text, JSON, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.policy import Policy


class ClaimStatus(str, PyEnum):
    """Claim lifecycle states"""

    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    PAID = "paid"


class Claim(Base, TimestampMixin):
    """
    Claim for unpaid rent filed against a policy.

    policy_id and claim_number never change after filing. Evidence links
    are external URLs; file contents are not stored here.
    """

    __tablename__ = "claims"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # RESTRICT: a policy with claims is never removed implicitly
    policy_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("policies.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    claim_number: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[ClaimStatus] = mapped_column(
        Enum(ClaimStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=ClaimStatus.PENDING,
    )
    amount_requested: Mapped[Decimal] = mapped_column(Numeric(precision=10, scale=2), nullable=False)
    months_of_unpaid_rent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    evidence_links: Mapped[list[str] | None] = mapped_column(JSON, nullable=True, default=list)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    policy: Mapped["Policy"] = relationship("Policy")

    __table_args__ = (
        UniqueConstraint("claim_number", name="uq_claims_claim_number"),
        CheckConstraint("amount_requested > 0", name="ck_claims_amount_requested"),
        CheckConstraint("months_of_unpaid_rent >= 0", name="ck_claims_unpaid_months"),
    )

    def __repr__(self) -> str:
        return f"<Claim(id={self.id}, claim_number='{self.claim_number}', status={self.status.value})>"
