from typing import Optional
from sqlalchemy.orm import Session

from app.database import unit_of_work
from app.models.property import Property
from app.models.tenant import Tenant
from app.models.user import User
from app.repositories.landlord_repository import LandlordRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.policy_repository import PolicyRepository
from app.repositories.tenant_repository import TenantRepository
from app.schemas.tenant_schemas import TenantCreate, TenantUpdate
from app.services.cascade import CascadeDeleter, CascadeReport
from app.services.counters import refresh_tenant_count
from app.services.reference_guard import ReferenceGuard
from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class TenantService:
    """Service layer for tenant business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = TenantRepository(db)
        self.property_repo = PropertyRepository(db)
        self.landlord_repo = LandlordRepository(db)
        self.policy_repo = PolicyRepository(db)
        self.guard = ReferenceGuard(db)

    @staticmethod
    def _ensure_capacity(property_: Property) -> None:
        if property_.current_tenants >= property_.max_tenants:
            raise ConflictException(
                f"Property {property_.id} is at capacity ({property_.max_tenants} tenants)."
            )

    def create_tenant(self, data: TenantCreate, user: User) -> Tenant:
        """
        Add a tenant to a property and recount the property's occupancy.

        Raises:
            ReferenceException: If the property is missing or owned by another user
            ConflictException: If the property is already full
        """
        with unit_of_work(self.db):
            property_ = self.guard.resolve_property(data.property_id, user)
            self._ensure_capacity(property_)

            tenant = Tenant(
                user_id=user.id,
                property_id=property_.id,
                name=data.name,
                email=data.email,
                rent_amount=data.rent_amount,
                payment_status=data.payment_status,
                lease_start=data.lease_start,
                lease_end=data.lease_end,
                last_payment_date=data.last_payment_date,
            )
            self.repo.add(tenant)
            refresh_tenant_count(self.db, property_)

        return tenant

    def get_tenants(
        self,
        user: User,
        property_id: Optional[int] = None,
        landlord_id: Optional[int] = None,
    ) -> list[Tenant]:
        """
        Get the user's tenants, optionally narrowed to a property or landlord.

        Raises:
            NotFoundException: If the property/landlord filter is not owned by user
        """
        if property_id is not None:
            if not self.property_repo.get_by_id_and_user(property_id, user.id):
                raise NotFoundException("Property not found")
            return self.repo.get_by_property(property_id, user.id)
        if landlord_id is not None:
            if not self.landlord_repo.get_by_id_and_user(landlord_id, user.id):
                raise NotFoundException("Landlord not found")
            return self.repo.get_by_landlord(landlord_id, user.id)
        return self.repo.get_by_user(user.id)

    def get_tenant(self, tenant_id: int, user: User) -> Tenant:
        """
        Raises:
            NotFoundException: If tenant not found or belongs to another user
        """
        tenant = self.repo.get_by_id_and_user(tenant_id, user.id)
        if not tenant:
            raise NotFoundException("Tenant not found")
        return tenant

    def update_tenant(self, tenant_id: int, data: TenantUpdate, user: User) -> Tenant:
        """
        Partially update a tenant.

        Lease order is validated on the merged record. Moving the tenant to
        another property checks ownership and capacity of the target and
        recounts both properties.

        Raises:
            NotFoundException: If tenant not found
            ReferenceException: If the new property is invalid
            ConflictException: If the new property is full
            ValidationException: If lease_end would precede lease_start
        """
        with unit_of_work(self.db):
            tenant = self.repo.get_by_id_and_user(tenant_id, user.id, for_update=True)
            if not tenant:
                raise NotFoundException("Tenant not found")

            lease_start = data.lease_start if data.lease_start is not None else tenant.lease_start
            lease_end = data.lease_end if data.lease_end is not None else tenant.lease_end
            if lease_end < lease_start:
                raise ValidationException("lease_end must be on or after lease_start")

            previous_property_id = tenant.property_id
            if data.property_id is not None and data.property_id != previous_property_id:
                if self.policy_repo.get_by_tenant(tenant.id):
                    raise ConflictException("An insured tenant cannot move to another property.")
                new_property = self.guard.resolve_property(data.property_id, user)
                self._ensure_capacity(new_property)
                tenant.property_id = new_property.id
                refresh_tenant_count(self.db, new_property)
                previous = self.property_repo.get_by_id_and_user(
                    previous_property_id, user.id, for_update=True
                )
                if previous:
                    refresh_tenant_count(self.db, previous)

            tenant.lease_start = lease_start
            tenant.lease_end = lease_end
            if data.name is not None:
                tenant.name = data.name
            if data.email is not None:
                tenant.email = data.email
            if data.rent_amount is not None:
                tenant.rent_amount = data.rent_amount
            if data.payment_status is not None:
                tenant.payment_status = data.payment_status
            if data.last_payment_date is not None:
                tenant.last_payment_date = data.last_payment_date

        return tenant

    def delete_tenant(self, tenant_id: int, user: User) -> CascadeReport:
        """Delete tenant together with its policy and that policy's claims"""
        with unit_of_work(self.db):
            tenant = self.repo.get_by_id_and_user(tenant_id, user.id, for_update=True)
            if not tenant:
                raise NotFoundException("Tenant not found")

            property_id = tenant.property_id
            report = CascadeDeleter(self.db).delete_tenants([tenant.id])

            property_ = self.property_repo.get_by_id_and_user(property_id, user.id, for_update=True)
            if property_:
                refresh_tenant_count(self.db, property_)

        LOGGER.info("Deleted tenant %s: %s", tenant_id, report)
        return report
