"""Legal status transitions for policies and claims."""

from app.core.exceptions import ConflictException
from app.models.claim import ClaimStatus
from app.models.policy import PolicyStatus

POLICY_TRANSITIONS: dict[PolicyStatus, frozenset[PolicyStatus]] = {
    PolicyStatus.ACTIVE: frozenset({PolicyStatus.EXPIRED, PolicyStatus.CANCELLED}),
    PolicyStatus.EXPIRED: frozenset(),
    PolicyStatus.CANCELLED: frozenset(),
}

# pending may skip review; paid is reachable from approved only
CLAIM_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.PENDING: frozenset(
        {ClaimStatus.UNDER_REVIEW, ClaimStatus.APPROVED, ClaimStatus.REJECTED}
    ),
    ClaimStatus.UNDER_REVIEW: frozenset({ClaimStatus.APPROVED, ClaimStatus.REJECTED}),
    ClaimStatus.APPROVED: frozenset({ClaimStatus.PAID}),
    ClaimStatus.REJECTED: frozenset(),
    ClaimStatus.PAID: frozenset(),
}

# Claims that record money owed or paid out are kept
UNDELETABLE_CLAIM_STATUSES = frozenset({ClaimStatus.APPROVED, ClaimStatus.PAID})


def can_transition_policy(current: PolicyStatus, target: PolicyStatus) -> bool:
    return current == target or target in POLICY_TRANSITIONS[current]


def can_transition_claim(current: ClaimStatus, target: ClaimStatus) -> bool:
    return current == target or target in CLAIM_TRANSITIONS[current]


def ensure_policy_transition(current: PolicyStatus, target: PolicyStatus) -> None:
    """
    Raises:
        ConflictException: If the transition is not allowed
    """
    if not can_transition_policy(current, target):
        raise ConflictException(
            f"Cannot change policy status from {current.value} to {target.value}."
        )


def ensure_claim_transition(current: ClaimStatus, target: ClaimStatus) -> None:
    """
    Raises:
        ConflictException: If the transition is not allowed
    """
    if not can_transition_claim(current, target):
        raise ConflictException(
            f"Cannot change claim status from {current.value} to {target.value}."
        )


def ensure_policy_deletable(claim_count: int) -> None:
    """A policy is deletable only while no claim of any status references it."""
    if claim_count > 0:
        raise ConflictException("Cannot delete policy with active claims.")


def ensure_claim_deletable(status: ClaimStatus) -> None:
    if status in UNDELETABLE_CLAIM_STATUSES:
        raise ConflictException(f"Cannot delete a claim that is {status.value}.")


def is_terminal_policy_status(status: PolicyStatus) -> bool:
    return not POLICY_TRANSITIONS[status]
