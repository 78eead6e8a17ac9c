from sqlalchemy.orm import Session

from app.core.exceptions import ReferenceException
from app.models.landlord import Landlord
from app.models.policy import Policy
from app.models.property import Property
from app.models.tenant import Tenant
from app.models.user import User
from app.repositories.landlord_repository import LandlordRepository
from app.repositories.policy_repository import PolicyRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.tenant_repository import TenantRepository


class ReferenceGuard:
    """
    Resolves the parents a child record points at.

    A parent that is missing or owned by another user is reported the same
    way, as a ReferenceException naming the reference. Parents are read
    with a row lock, so the guard must run inside the caller's unit of
    work; a concurrent delete of the parent then waits for (or fails) the
    write instead of leaving an orphan.
    """

    def __init__(self, db: Session):
        self.landlord_repo = LandlordRepository(db)
        self.property_repo = PropertyRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.policy_repo = PolicyRepository(db)

    def resolve_landlord(self, landlord_id: int, user: User) -> Landlord:
        landlord = self.landlord_repo.get_by_id_and_user(landlord_id, user.id, for_update=True)
        if not landlord:
            raise ReferenceException("Invalid landlord.")
        return landlord

    def resolve_property(self, property_id: int, user: User, landlord_id: int | None = None) -> Property:
        """
        Resolve a property, optionally requiring it to belong to landlord_id.
        """
        property_ = self.property_repo.get_by_id_and_user(property_id, user.id, for_update=True)
        if not property_:
            raise ReferenceException("Invalid property.")
        if landlord_id is not None and property_.landlord_id != landlord_id:
            raise ReferenceException("Invalid property.")
        return property_

    def resolve_tenant(self, tenant_id: int, user: User, property_id: int | None = None) -> Tenant:
        """
        Resolve a tenant, optionally requiring it to live in property_id.
        """
        tenant = self.tenant_repo.get_by_id_and_user(tenant_id, user.id, for_update=True)
        if not tenant:
            raise ReferenceException("Invalid tenant.")
        if property_id is not None and tenant.property_id != property_id:
            raise ReferenceException("Invalid tenant.")
        return tenant

    def resolve_policy(self, policy_id: int, user: User) -> Policy:
        policy = self.policy_repo.get_by_id_and_user(policy_id, user.id, for_update=True)
        if not policy:
            raise ReferenceException("Invalid policy.")
        return policy
