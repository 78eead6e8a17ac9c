from sqlalchemy.orm import Session
from app.models.landlord import Landlord


class LandlordRepository:
    """Repository for Landlord model operations scoped by owning user"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> list[Landlord]:
        """Get all landlords for a user"""
        return (
            self.db.query(Landlord)
            .filter(Landlord.user_id == user_id)
            .order_by(Landlord.created_at.desc(), Landlord.id.desc())
            .all()
        )

    def get_by_id_and_user(
        self, landlord_id: int, user_id: int, for_update: bool = False
    ) -> Landlord | None:
        """
        Get landlord ensuring it belongs to user.

        Returns None if landlord doesn't exist or belongs to another user.
        With for_update the row stays locked until the transaction ends.
        """
        query = self.db.query(Landlord).filter(
            Landlord.id == landlord_id, Landlord.user_id == user_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def add(self, landlord: Landlord) -> Landlord:
        """Stage a new landlord and assign its id (no commit)"""
        self.db.add(landlord)
        self.db.flush()
        return landlord

    def delete_ids(self, landlord_ids: list[int]) -> int:
        """Delete landlords by id. Dependents must already be gone."""
        if not landlord_ids:
            return 0
        return self.db.query(Landlord).filter(Landlord.id.in_(landlord_ids)).delete()

    def count_by_user(self, user_id: int) -> int:
        return self.db.query(Landlord).filter(Landlord.user_id == user_id).count()
