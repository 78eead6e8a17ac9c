from sqlalchemy.orm import Session
from app.database import unit_of_work
from app.models.landlord import Landlord
from app.models.user import User
from app.repositories.landlord_repository import LandlordRepository
from app.schemas.landlord_schemas import LandlordCreate, LandlordUpdate
from app.services.cascade import CascadeDeleter, CascadeReport
from app.core.exceptions import NotFoundException


class LandlordService:
    """Service for landlord business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = LandlordRepository(db)

    def create_landlord(self, data: LandlordCreate, user: User) -> Landlord:
        """Create new landlord for user"""
        landlord = Landlord(
            user_id=user.id,
            name=data.name,
            email=data.email,
            phone=data.phone,
            property_count=0,
        )
        with unit_of_work(self.db):
            self.repo.add(landlord)
        return landlord

    def get_user_landlords(self, user: User) -> list[Landlord]:
        return self.repo.get_by_user(user.id)

    def get_landlord(self, landlord_id: int, user: User) -> Landlord:
        """
        Get specific landlord ensuring user ownership.

        Raises:
            NotFoundException: If landlord not found or belongs to another user
        """
        landlord = self.repo.get_by_id_and_user(landlord_id, user.id)
        if not landlord:
            raise NotFoundException("Landlord not found")
        return landlord

    def update_landlord(self, landlord_id: int, data: LandlordUpdate, user: User) -> Landlord:
        """Update landlord contact details"""
        with unit_of_work(self.db):
            landlord = self.get_landlord(landlord_id, user)

            if data.name is not None:
                landlord.name = data.name
            if data.email is not None:
                landlord.email = data.email
            if data.phone is not None:
                landlord.phone = data.phone

        return landlord

    def delete_landlord(self, landlord_id: int, user: User) -> CascadeReport:
        """Delete landlord with all properties, tenants, policies and claims"""
        with unit_of_work(self.db):
            landlord = self.repo.get_by_id_and_user(landlord_id, user.id, for_update=True)
            if not landlord:
                raise NotFoundException("Landlord not found")
            return CascadeDeleter(self.db).delete_landlords([landlord.id])
