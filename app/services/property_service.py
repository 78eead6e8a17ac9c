from typing import Optional
from sqlalchemy.orm import Session

from app.database import unit_of_work
from app.models.property import Property
from app.models.user import User
from app.repositories.landlord_repository import LandlordRepository
from app.repositories.policy_repository import PolicyRepository
from app.repositories.property_repository import PropertyRepository
from app.schemas.property_schemas import PropertyCreate, PropertyUpdate
from app.services.cascade import CascadeDeleter, CascadeReport
from app.services.counters import refresh_property_count
from app.services.reference_guard import ReferenceGuard
from app.core.exceptions import ConflictException, NotFoundException
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class PropertyService:
    """Service layer for property business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = PropertyRepository(db)
        self.landlord_repo = LandlordRepository(db)
        self.policy_repo = PolicyRepository(db)
        self.guard = ReferenceGuard(db)

    def create_property(self, data: PropertyCreate, user: User) -> Property:
        """
        Create a property and bump the landlord's property count atomically.

        Raises:
            ReferenceException: If the landlord is missing or owned by another user
        """
        with unit_of_work(self.db):
            landlord = self.guard.resolve_landlord(data.landlord_id, user)
            property_ = Property(
                user_id=user.id,
                landlord_id=landlord.id,
                name=data.name,
                address=data.address,
                city=data.city,
                rent_amount=data.rent_amount,
                property_type=data.property_type,
                status=data.status,
                max_tenants=data.max_tenants,
                current_tenants=0,
                description=data.description,
            )
            self.repo.add(property_)
            refresh_property_count(self.db, landlord)

        return property_

    def get_properties(self, user: User, landlord_id: Optional[int] = None) -> list[Property]:
        """
        Get the user's properties, optionally only those of one landlord.

        Raises:
            NotFoundException: If landlord_id is given but not owned by user
        """
        if landlord_id is None:
            return self.repo.get_by_user(user.id)
        if not self.landlord_repo.get_by_id_and_user(landlord_id, user.id):
            raise NotFoundException("Landlord not found")
        return self.repo.get_by_landlord(landlord_id, user.id)

    def get_property(self, property_id: int, user: User) -> Property:
        """
        Raises:
            NotFoundException: If property not found or belongs to another user
        """
        property_ = self.repo.get_by_id_and_user(property_id, user.id)
        if not property_:
            raise NotFoundException("Property not found")
        return property_

    def update_property(self, property_id: int, data: PropertyUpdate, user: User) -> Property:
        """
        Partially update a property.

        Moving the property to another landlord re-checks ownership of the
        new landlord and recounts both landlords in the same transaction.

        Raises:
            NotFoundException: If property not found
            ReferenceException: If the new landlord is invalid
            ConflictException: If max_tenants drops below current occupancy
        """
        with unit_of_work(self.db):
            property_ = self.repo.get_by_id_and_user(property_id, user.id, for_update=True)
            if not property_:
                raise NotFoundException("Property not found")

            if data.max_tenants is not None and data.max_tenants < property_.current_tenants:
                raise ConflictException(
                    f"max_tenants cannot be lower than the {property_.current_tenants} current tenants."
                )

            previous_landlord_id = property_.landlord_id
            if data.landlord_id is not None and data.landlord_id != previous_landlord_id:
                if self.policy_repo.count_for_property(property_.id):
                    raise ConflictException("A property with policies cannot move to another landlord.")
                new_landlord = self.guard.resolve_landlord(data.landlord_id, user)
                property_.landlord_id = new_landlord.id
                refresh_property_count(self.db, new_landlord)
                previous = self.landlord_repo.get_by_id_and_user(previous_landlord_id, user.id)
                if previous:
                    refresh_property_count(self.db, previous)

            if data.name is not None:
                property_.name = data.name
            if data.address is not None:
                property_.address = data.address
            if data.city is not None:
                property_.city = data.city
            if data.rent_amount is not None:
                property_.rent_amount = data.rent_amount
            if data.property_type is not None:
                property_.property_type = data.property_type
            if data.status is not None:
                property_.status = data.status
            if data.max_tenants is not None:
                property_.max_tenants = data.max_tenants
            if data.description is not None:
                property_.description = data.description

        return property_

    def delete_property(self, property_id: int, user: User) -> CascadeReport:
        """Delete property with its tenants, their policies and claims"""
        with unit_of_work(self.db):
            property_ = self.repo.get_by_id_and_user(property_id, user.id, for_update=True)
            if not property_:
                raise NotFoundException("Property not found")

            landlord_id = property_.landlord_id
            report = CascadeDeleter(self.db).delete_properties([property_.id])

            landlord = self.landlord_repo.get_by_id_and_user(landlord_id, user.id, for_update=True)
            if landlord:
                refresh_property_count(self.db, landlord)

        LOGGER.info("Deleted property %s: %s", property_id, report)
        return report
