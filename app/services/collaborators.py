"""
Interfaces of the external collaborators the core calls into.

Risk scoring, document rendering and notification delivery live outside
this service. The core only depends on these protocols; concrete
implementations are injected through FastAPI dependencies.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Any, Protocol

from app.models.policy import RiskDecision
from app.models.property import Property
from app.models.tenant import Tenant
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


@dataclass(frozen=True)
class RiskAssessment:
    score: Decimal
    decision: RiskDecision


class RiskScorer(Protocol):
    def assess(self, property_: Property, tenant: Tenant) -> RiskAssessment: ...


class DocumentRenderer(Protocol):
    media_type: str

    def render(self, detail: Any) -> bytes: ...


class TemplateKind(str, PyEnum):
    POLICY_ISSUED = "policy_issued"
    CLAIM_FILED = "claim_filed"
    CLAIM_STATUS_CHANGED = "claim_status_changed"


class Notifier(Protocol):
    def send(self, recipient: str, template_kind: TemplateKind, payload: dict[str, Any]) -> None: ...


class LoggingNotifier:
    """Default notifier: records the notification instead of delivering it."""

    def send(self, recipient: str, template_kind: TemplateKind, payload: dict[str, Any]) -> None:
        LOGGER.info(
            "Notification %s for %s: %s", template_kind.value, recipient, payload
        )


def notify_safely(notifier: Notifier, recipient: str, template_kind: TemplateKind, payload: dict[str, Any]) -> None:
    """
    Deliver a post-commit notification.

    The write it reports on is already committed, so a delivery failure is
    logged and not raised back to the caller.
    """
    try:
        notifier.send(recipient, template_kind, payload)
    except Exception:
        LOGGER.exception("Failed to send %s notification to %s", template_kind.value, recipient)
