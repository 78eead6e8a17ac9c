from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.database import unit_of_work
from app.models.claim import Claim, ClaimStatus
from app.models.policy import PolicyStatus
from app.models.user import User
from app.repositories.claim_repository import ClaimRepository
from app.schemas.claim_schemas import ClaimCreate, ClaimUpdate
from app.services.collaborators import LoggingNotifier, Notifier, TemplateKind, notify_safely
from app.services.lifecycle import ensure_claim_deletable, ensure_claim_transition
from app.services.numbering import NumberingService
from app.services.reference_guard import ReferenceGuard
from app.core.exceptions import ConflictException, NotFoundException, ValidationException
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ClaimService:
    """Service layer for claim filing and review"""

    def __init__(
        self,
        db: Session,
        notifier: Optional[Notifier] = None,
        numbering: Optional[NumberingService] = None,
    ):
        self.db = db
        self.repo = ClaimRepository(db)
        self.guard = ReferenceGuard(db)
        self.notifier = notifier or LoggingNotifier()
        self.numbering = numbering or NumberingService()

    def create_claim(self, data: ClaimCreate, user: User) -> Claim:
        """
        File a pending claim against one of the user's active policies.

        The policy row is locked for the duration of the insert, so the
        policy cannot be deleted underneath the new claim.

        Raises:
            ReferenceException: If the policy is missing or owned by another user
            ConflictException: If the policy is not active
            ValidationException: If a data constraint fails
        """
        for attempt in range(1, settings.NUMBER_ISSUE_MAX_ATTEMPTS + 1):
            claim_number = self.numbering.next_claim_number()
            try:
                with unit_of_work(self.db):
                    policy = self.guard.resolve_policy(data.policy_id, user)
                    if policy.status != PolicyStatus.ACTIVE:
                        raise ConflictException(
                            f"Claims can only be filed against an active policy (policy is {policy.status.value})."
                        )

                    claim = Claim(
                        user_id=user.id,
                        policy_id=policy.id,
                        claim_number=claim_number,
                        status=ClaimStatus.PENDING,
                        amount_requested=data.amount_requested,
                        months_of_unpaid_rent=data.months_of_unpaid_rent,
                        evidence_links=[str(link) for link in data.evidence_links or []],
                        notes=data.notes,
                    )
                    self.repo.add(claim)
            except IntegrityError as e:
                if self.repo.number_exists(claim_number):
                    LOGGER.warning(
                        "Claim number collision on attempt %s for user %s, retrying", attempt, user.id
                    )
                    continue
                LOGGER.error("Claim %s rejected by the database: %s", claim_number, e.orig)
                raise ValidationException("Claim violates a data constraint.") from e

            LOGGER.info("Filed claim %s against policy %s", claim.claim_number, claim.policy_id)
            self._notify(claim, TemplateKind.CLAIM_FILED)
            return claim

        raise ConflictException("Could not issue a unique claim number, please retry.")

    def get_claim(self, claim_id: int, user: User) -> Claim:
        """
        Raises:
            NotFoundException: If claim not found or belongs to another user
        """
        claim = self.repo.get_by_id_and_user(claim_id, user.id)
        if not claim:
            raise NotFoundException("Claim not found")
        return claim

    def update_claim(self, claim_id: int, data: ClaimUpdate, user: User) -> Claim:
        """
        Update status, evidence or notes of a claim.

        All requested changes are applied together or not at all.

        Raises:
            NotFoundException: If claim not found
            ConflictException: If the status transition is not allowed
        """
        with unit_of_work(self.db):
            claim = self.repo.get_by_id_and_user(claim_id, user.id, for_update=True)
            if not claim:
                raise NotFoundException("Claim not found")

            previous = claim.status
            if data.status is not None:
                ensure_claim_transition(previous, data.status)
                claim.status = data.status
            if data.evidence_links is not None:
                claim.evidence_links = [str(link) for link in data.evidence_links]
            if data.notes is not None:
                claim.notes = data.notes

        if claim.status != previous:
            LOGGER.info("Claim %s moved from %s to %s", claim.claim_number, previous.value, claim.status.value)
            self._notify(claim, TemplateKind.CLAIM_STATUS_CHANGED, previous_status=previous.value)
        return claim

    def delete_claim(self, claim_id: int, user: User) -> None:
        """
        Raises:
            NotFoundException: If claim not found
            ConflictException: If the claim is approved or paid
        """
        with unit_of_work(self.db):
            claim = self.repo.get_by_id_and_user(claim_id, user.id, for_update=True)
            if not claim:
                raise NotFoundException("Claim not found")
            ensure_claim_deletable(claim.status)
            self.repo.delete(claim)

        LOGGER.info("Deleted claim %s", claim_id)

    def _notify(self, claim: Claim, template_kind: TemplateKind, **extra) -> None:
        payload = {
            "claim_number": claim.claim_number,
            "policy_number": claim.policy.policy_number,
            "status": claim.status.value,
            "amount_requested": str(claim.amount_requested),
            "currency": settings.CURRENCY,
            **extra,
        }
        notify_safely(self.notifier, claim.policy.landlord.email, template_kind, payload)
