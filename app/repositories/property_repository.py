from sqlalchemy import func
from sqlalchemy.orm import Session
from app.models.property import Property


class PropertyRepository:
    """Repository for Property model operations scoped by owning user"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user(self, user_id: int) -> list[Property]:
        return (
            self.db.query(Property)
            .filter(Property.user_id == user_id)
            .order_by(Property.created_at.desc(), Property.id.desc())
            .all()
        )

    def get_by_landlord(self, landlord_id: int, user_id: int) -> list[Property]:
        """Get properties of a landlord (multi-tenant safe)"""
        return (
            self.db.query(Property)
            .filter(Property.landlord_id == landlord_id, Property.user_id == user_id)
            .order_by(Property.created_at.desc(), Property.id.desc())
            .all()
        )

    def get_by_id_and_user(
        self, property_id: int, user_id: int, for_update: bool = False
    ) -> Property | None:
        """
        Get property ensuring it belongs to user.

        Returns None if property doesn't exist or belongs to another user.
        """
        query = self.db.query(Property).filter(
            Property.id == property_id, Property.user_id == user_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def add(self, property_: Property) -> Property:
        """Stage a new property and assign its id (no commit)"""
        self.db.add(property_)
        self.db.flush()
        return property_

    def count_for_landlord(self, landlord_id: int) -> int:
        return (
            self.db.query(func.count(Property.id))
            .filter(Property.landlord_id == landlord_id)
            .scalar()
        )

    def ids_for_landlords(self, landlord_ids: list[int]) -> list[int]:
        if not landlord_ids:
            return []
        rows = self.db.query(Property.id).filter(Property.landlord_id.in_(landlord_ids)).all()
        return [row.id for row in rows]

    def delete_ids(self, property_ids: list[int]) -> int:
        """Delete properties by id. Tenants must already be gone."""
        if not property_ids:
            return 0
        return self.db.query(Property).filter(Property.id.in_(property_ids)).delete()

    def count_by_user(self, user_id: int) -> int:
        return self.db.query(Property).filter(Property.user_id == user_id).count()
