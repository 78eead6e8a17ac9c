"""
Human-readable identifiers for policies and claims.

Numbers are random rather than sequential, so issuing one needs no shared
counter. Uniqueness is guaranteed by the unique constraints on
policies.policy_number and claims.claim_number; the issuing services retry
with a fresh number when an insert collides.
"""

import secrets
from datetime import date
from typing import Callable, Optional

from app.config import settings

TOKEN_BYTES = 4


def _format_number(prefix: str, today: date, token: str) -> str:
    return f"{prefix}-{today:%Y%m%d}-{token.upper()}"


def _random_token() -> str:
    return secrets.token_hex(TOKEN_BYTES)


class NumberingService:
    """
    Issues policy and claim numbers like POL-20240131-9F2C04AB.

    Args:
        token_factory: Source of the random part; injectable for tests
        today: Date source for the date part
    """

    def __init__(
        self,
        token_factory: Callable[[], str] = _random_token,
        today: Optional[Callable[[], date]] = None,
    ):
        self.token_factory = token_factory
        self.today = today or date.today

    def next_policy_number(self) -> str:
        return _format_number(settings.POLICY_NUMBER_PREFIX, self.today(), self.token_factory())

    def next_claim_number(self) -> str:
        return _format_number(settings.CLAIM_NUMBER_PREFIX, self.today(), self.token_factory())
