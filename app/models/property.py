from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Numeric, ForeignKey, Enum, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import TYPE_CHECKING
from app.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from app.models.landlord import Landlord


class PropertyType(str, PyEnum):
    """Property type enumeration"""

    APARTMENT = "apartment"
    HOUSE = "house"
    STUDIO = "studio"


class PropertyStatus(str, PyEnum):
    """Property occupancy status"""

    AVAILABLE = "available"
    RENTED = "rented"
    MAINTENANCE = "maintenance"


class Property(Base, TimestampMixin):
    """
    Rental unit belonging to one landlord.

    rent_amount is the monthly rent used to price policies.
    current_tenants is maintained by the tenant service.
    """

    __tablename__ = "properties"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    landlord_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("landlords.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False, default="Unknown")
    rent_amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=12, scale=2), nullable=False, default=Decimal("0.00")
    )
    property_type: Mapped[PropertyType] = mapped_column(
        Enum(PropertyType, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
    )
    status: Mapped[PropertyStatus] = mapped_column(
        Enum(PropertyStatus, native_enum=False, values_callable=lambda x: [e.value for e in x]),
        nullable=False,
        default=PropertyStatus.AVAILABLE,
    )
    max_tenants: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    current_tenants: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    landlord: Mapped["Landlord"] = relationship("Landlord")

    def __repr__(self) -> str:
        return f"<Property(id={self.id}, name='{self.name}', landlord_id={self.landlord_id})>"
