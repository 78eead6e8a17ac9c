from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.repositories.claim_repository import ClaimRepository
from app.repositories.landlord_repository import LandlordRepository
from app.repositories.policy_repository import PolicyRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.tenant_repository import TenantRepository
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass
class CascadeReport:
    """Rows removed by one cascading delete"""

    landlords: int = 0
    properties: int = 0
    tenants: int = 0
    policies: int = 0
    claims: int = 0


class CascadeDeleter:
    """
    Explicit fan-out delete for the landlord -> property -> tenant ->
    policy -> claim chain.

    Dependent ids are resolved first and rows are removed children before
    parents, without relying on database ON DELETE rules. Nothing here
    commits: callers run it inside their unit of work so the whole chain
    disappears atomically or not at all.
    """

    def __init__(self, db: Session):
        self.landlord_repo = LandlordRepository(db)
        self.property_repo = PropertyRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.policy_repo = PolicyRepository(db)
        self.claim_repo = ClaimRepository(db)

    def delete_tenants(self, tenant_ids: list[int], report: CascadeReport | None = None) -> CascadeReport:
        report = report or CascadeReport()
        policy_ids = self.policy_repo.ids_for_tenants(tenant_ids)
        report.claims += self.claim_repo.delete_for_policies(policy_ids)
        report.policies += self.policy_repo.delete_ids(policy_ids)
        report.tenants += self.tenant_repo.delete_ids(tenant_ids)
        return report

    def delete_properties(self, property_ids: list[int], report: CascadeReport | None = None) -> CascadeReport:
        report = report or CascadeReport()
        tenant_ids = self.tenant_repo.ids_for_properties(property_ids)
        self.delete_tenants(tenant_ids, report)
        report.properties += self.property_repo.delete_ids(property_ids)
        return report

    def delete_landlords(self, landlord_ids: list[int]) -> CascadeReport:
        report = CascadeReport()
        property_ids = self.property_repo.ids_for_landlords(landlord_ids)
        self.delete_properties(property_ids, report)
        report.landlords += self.landlord_repo.delete_ids(landlord_ids)
        LOGGER.info("Cascade delete of landlords %s removed %s", landlord_ids, report)
        return report
