from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import unit_of_work
from app.models.policy import Policy, PolicyStatus, RiskDecision
from app.models.user import User
from app.repositories.claim_repository import ClaimRepository
from app.repositories.policy_repository import PolicyRepository
from app.repositories.property_repository import PropertyRepository
from app.repositories.tenant_repository import TenantRepository
from app.schemas.policy_schemas import PolicyCreate
from app.services.collaborators import (
    LoggingNotifier,
    Notifier,
    RiskAssessment,
    RiskScorer,
    TemplateKind,
    notify_safely,
)
from app.services.derivation import derive_policy_terms, normalize_risk_score
from app.services.lifecycle import (
    ensure_policy_deletable,
    ensure_policy_transition,
    is_terminal_policy_status,
)
from app.services.numbering import NumberingService
from app.services.reference_guard import ReferenceGuard
from app.core.exceptions import (
    ConflictException,
    NotFoundException,
    ReferenceException,
    ValidationException,
)
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class PolicyService:
    """Service layer for policy issuance and lifecycle"""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        risk_scorer: Optional[RiskScorer] = None,
        numbering: Optional[NumberingService] = None,
    ):
        self.db = db
        self.repo = PolicyRepository(db)
        self.claim_repo = ClaimRepository(db)
        self.property_repo = PropertyRepository(db)
        self.tenant_repo = TenantRepository(db)
        self.guard = ReferenceGuard(db)
        self.notifier = notifier or LoggingNotifier()
        self.risk_scorer = risk_scorer
        self.numbering = numbering or NumberingService()

    def create_policy(self, data: PolicyCreate, user: User) -> Policy:
        """
        Issue a policy.

        Parents are resolved, terms derived, a number issued and the row
        inserted in one transaction. A number that collides with an existing
        policy rolls the attempt back and the whole issuance is retried with
        a fresh number; callers never see the collision. Any other integrity
        failure is not retried.

        Args:
            data: Validated policy input
            user: Owning user

        Returns:
            Issued policy

        Raises:
            ReferenceException: If landlord, property or tenant is invalid
            ValidationException: If no risk score is given and no scorer is configured,
                the scorer output is out of range, or a data constraint fails
            ConflictException: If the tenant is already insured
        """
        assessment = self._assess_risk(data, user)

        for attempt in range(1, settings.NUMBER_ISSUE_MAX_ATTEMPTS + 1):
            policy_number = self.numbering.next_policy_number()
            try:
                with unit_of_work(self.db):
                    policy = self._issue(data, assessment, policy_number, user)
            except IntegrityError as e:
                if self.repo.number_exists(policy_number):
                    LOGGER.warning(
                        "Policy number collision on attempt %s for user %s, retrying",
                        attempt,
                        user.id,
                    )
                    continue
                if self.repo.get_by_tenant(data.tenant_id):
                    raise ConflictException("Tenant is already covered by a policy.")
                LOGGER.error("Policy %s rejected by the database: %s", policy_number, e.orig)
                raise ValidationException("Policy violates a data constraint.") from e

            LOGGER.info("Issued policy %s (id=%s) for user %s", policy.policy_number, policy.id, user.id)
            notify_safely(
                self.notifier,
                policy.landlord.email,
                TemplateKind.POLICY_ISSUED,
                {
                    "policy_number": policy.policy_number,
                    "tenant_name": policy.tenant.name,
                    "start_date": policy.start_date.isoformat(),
                    "end_date": policy.end_date.isoformat(),
                    "premium_amount": str(policy.premium_amount),
                    "currency": settings.CURRENCY,
                },
            )
            return policy

        raise ConflictException("Could not issue a unique policy number, please retry.")

    def _assess_risk(self, data: PolicyCreate, user: User) -> RiskAssessment:
        """
        Use the caller's score and decision, or ask the risk scorer.

        Runs before the issuing transaction so no row lock is held while
        the scorer works. The returned score is already rounded to cents, the
        precision it is stored with.
        """
        if data.risk_score is not None and data.decision is not None:
            return RiskAssessment(score=normalize_risk_score(data.risk_score), decision=data.decision)

        if self.risk_scorer is None:
            raise ValidationException(
                "risk_score and decision are required when no risk scorer is configured"
            )

        property_ = self.property_repo.get_by_id_and_user(data.property_id, user.id)
        if not property_:
            raise ReferenceException("Invalid property.")
        tenant = self.tenant_repo.get_by_id_and_user(data.tenant_id, user.id)
        if not tenant:
            raise ReferenceException("Invalid tenant.")

        assessment = self.risk_scorer.assess(property_, tenant)
        try:
            return RiskAssessment(
                score=normalize_risk_score(assessment.score),
                decision=RiskDecision(assessment.decision),
            )
        except ValueError as e:
            raise ValidationException(f"Risk scorer returned an invalid assessment: {e}") from e

    def _issue(
        self, data: PolicyCreate, assessment: RiskAssessment, policy_number: str, user: User
    ) -> Policy:
        landlord = self.guard.resolve_landlord(data.landlord_id, user)
        property_ = self.guard.resolve_property(data.property_id, user, landlord_id=landlord.id)
        tenant = self.guard.resolve_tenant(data.tenant_id, user, property_id=property_.id)

        if self.repo.get_by_tenant(tenant.id):
            raise ConflictException("Tenant is already covered by a policy.")

        terms = derive_policy_terms(
            start_date=data.start_date,
            coverage_months=data.coverage_months,
            monthly_rent=property_.rent_amount,
            risk_score=assessment.score,
        )

        policy = Policy(
            user_id=user.id,
            landlord_id=landlord.id,
            property_id=property_.id,
            tenant_id=tenant.id,
            policy_number=policy_number,
            status=data.status,
            coverage_months=data.coverage_months,
            risk_score=assessment.score,
            decision=assessment.decision,
            start_date=data.start_date,
            end_date=terms.end_date,
            premium_amount=terms.premium_amount,
        )
        return self.repo.add(policy)

    def get_policy(self, policy_id: int, user: User) -> Policy:
        """
        Raises:
            NotFoundException: If policy not found or belongs to another user
        """
        policy = self.repo.get_by_id_and_user(policy_id, user.id)
        if not policy:
            raise NotFoundException("Policy not found")
        return policy

    def update_policy_status(self, policy_id: int, status: PolicyStatus, user: User) -> Policy:
        """
        Move a policy to a new status.

        Raises:
            NotFoundException: If policy not found
            ConflictException: If the transition is not allowed
        """
        with unit_of_work(self.db):
            policy = self.repo.get_by_id_and_user(policy_id, user.id, for_update=True)
            if not policy:
                raise NotFoundException("Policy not found")

            previous = policy.status
            ensure_policy_transition(previous, status)
            policy.status = status

        if previous != status:
            LOGGER.info(
                "Policy %s moved from %s to %s%s",
                policy_id,
                previous.value,
                status.value,
                " (final)" if is_terminal_policy_status(status) else "",
            )
        return policy

    def delete_policy(self, policy_id: int, user: User) -> None:
        """
        Delete a policy that has no claims.

        Unlike landlords, properties and tenants, a policy never cascades:
        any claim, whatever its status, blocks the deletion.

        Raises:
            NotFoundException: If policy not found
            ConflictException: If at least one claim references the policy
        """
        with unit_of_work(self.db):
            policy = self.repo.get_by_id_and_user(policy_id, user.id, for_update=True)
            if not policy:
                raise NotFoundException("Policy not found")

            ensure_policy_deletable(self.claim_repo.count_for_policy(policy.id))
            self.db.delete(policy)

        LOGGER.info("Deleted policy %s", policy_id)
