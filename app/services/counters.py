"""
Denormalized counters kept in step with their triggering writes.

Counters are recomputed from the rows rather than incremented, so running
them twice, or after a cascade, always lands on the true value. Callers
invoke them inside the same unit of work as the change that moved them.
"""

from sqlalchemy.orm import Session

from app.models.landlord import Landlord
from app.models.property import Property
from app.repositories.property_repository import PropertyRepository
from app.repositories.tenant_repository import TenantRepository


def refresh_property_count(db: Session, landlord: Landlord) -> int:
    db.flush()
    landlord.property_count = PropertyRepository(db).count_for_landlord(landlord.id)
    return landlord.property_count


def refresh_tenant_count(db: Session, property_: Property) -> int:
    db.flush()
    property_.current_tenants = TenantRepository(db).count_for_property(property_.id)
    return property_.current_tenants
