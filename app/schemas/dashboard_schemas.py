from pydantic import BaseModel


class DashboardSummary(BaseModel):
    """Portfolio totals for the owning user"""

    landlords: int
    properties: int
    tenants: int
    policies: int
    active_policies: int
    claims: int
    pending_claims: int
    total_claim_amount: float
    total_rent_collected: float
    currency: str
