"""
Derived financial fields of a policy.

Pure functions: the same inputs always give the same outputs, so the
fields can be recomputed at any time without drift.
"""

import calendar
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

BASE_PREMIUM_RATE = Decimal("0.03")
CENT = Decimal("0.01")

# (exclusive upper bound of the risk score, multiplier); scores on a bound
# fall into the next bracket, so 50 -> 1.0 and 75 -> 0.8
RISK_BRACKETS: tuple[tuple[Decimal, Decimal], ...] = (
    (Decimal("50"), Decimal("1.5")),
    (Decimal("75"), Decimal("1.0")),
)
LOW_RISK_MULTIPLIER = Decimal("0.8")
MIN_RISK_SCORE = Decimal("0")
MAX_RISK_SCORE = Decimal("100")


@dataclass(frozen=True)
class PolicyTerms:
    end_date: date
    premium_amount: Decimal


def _as_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 49.999 exact instead of their binary expansion
    return Decimal(str(value))


def add_months(start: date, months: int) -> date:
    """
    Calendar-month addition clamped to the end of the target month.

    2024-01-31 + 1 month is 2024-02-29; 2023-01-31 + 1 month is 2023-02-28.
    """
    if months < 0:
        raise ValueError("months must be >= 0")
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(start.day, last_day))


def compute_coverage_end_date(start_date: date, coverage_months: int) -> date:
    if coverage_months < 1:
        raise ValueError("coverage_months must be >= 1")
    return add_months(start_date, coverage_months)


def normalize_risk_score(risk_score) -> Decimal:
    """
    Risk score as stored on a policy: 0 to 100, rounded half-up to cents.

    Pricing must use this value, not the raw input, so the stored score
    and the stored premium always agree.

    Raises:
        ValueError: If the score is not a finite number within 0..100
    """
    try:
        score = _as_decimal(risk_score)
    except InvalidOperation:
        raise ValueError(f"risk score must be a number, got {risk_score!r}")
    if not score.is_finite():
        raise ValueError(f"risk score must be a finite number, got {risk_score!r}")
    score = score.quantize(CENT, rounding=ROUND_HALF_UP)
    if not MIN_RISK_SCORE <= score <= MAX_RISK_SCORE:
        raise ValueError(f"risk score must be between 0 and 100, got {risk_score}")
    return score


def risk_multiplier(risk_score) -> Decimal:
    score = _as_decimal(risk_score)
    for upper_bound, multiplier in RISK_BRACKETS:
        if score < upper_bound:
            return multiplier
    return LOW_RISK_MULTIPLIER


def compute_premium(monthly_rent, coverage_months: int, risk_score) -> Decimal:
    """
    premium = rent x 0.03 x coverage months x risk multiplier

    Rounded half-up to cents.
    """
    if coverage_months < 1:
        raise ValueError("coverage_months must be >= 1")
    premium = (
        _as_decimal(monthly_rent)
        * BASE_PREMIUM_RATE
        * Decimal(coverage_months)
        * risk_multiplier(risk_score)
    )
    return premium.quantize(CENT, rounding=ROUND_HALF_UP)


def derive_policy_terms(start_date: date, coverage_months: int, monthly_rent, risk_score) -> PolicyTerms:
    return PolicyTerms(
        end_date=compute_coverage_end_date(start_date, coverage_months),
        premium_amount=compute_premium(monthly_rent, coverage_months, risk_score),
    )
