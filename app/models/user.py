from sqlalchemy import String, Integer
from sqlalchemy.orm import Mapped, mapped_column
from app.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """
    Owning user mirrored from the external auth service.

    Only stores the JWT subject; no credentials, OTP or session state.
    Auto-created on the first authenticated request. Every landlord,
    property, tenant, policy and claim row carries this user's id.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    auth_user_id: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, auth_user_id='{self.auth_user_id}')>"
