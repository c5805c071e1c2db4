"""Map remote scoring API responses onto ScoreResult"""

import math
from typing import Any, Dict, Mapping, Optional

from finupi_gateway.domain.exceptions import ScoringAPIError
from finupi_gateway.domain.loans import calculate_emi
from finupi_gateway.domain.models import (
    FinancialSummary,
    LoanEligibility,
    ScoreComponents,
    ScoreResult,
)
from finupi_gateway.domain.scoring import MAX_SCORE, MIN_SCORE, categorize_score

# remote component name -> (local component name, default when absent)
COMPONENT_MAPPING = {
    "financial_discipline": ("payment_history", 75),
    "expense_management": ("credit_utilization", 75),
    "transaction_history": ("upi_activity", 90),
    "income_stability": ("transaction_patterns", 80),
}
REMOTE_CREDIT_AGE = 70

DEFAULT_MAX_AMOUNT = 5_000
DEFAULT_DURATION_MONTHS = 12
DEFAULT_INTEREST_RATE = 14.0


def _number(value: Any, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return float(value)


def _component(value: Any, default: int) -> int:
    return int(round(max(0.0, min(100.0, _number(value, default)))))


def map_remote_response(payload: Mapping[str, Any], prior_score: Optional[int] = None) -> ScoreResult:
    """
    Translate a /get_credit_score response into the local result shape.

    The category is recomputed from the score so remote and local results
    use the same bands.

    Raises:
        ScoringAPIError: If the payload carries no usable credit_score
    """
    if not isinstance(payload, Mapping):
        raise ScoringAPIError("Scoring API response is not a JSON object")

    raw_score = payload.get("credit_score")
    if isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)) or not math.isfinite(raw_score):
        raise ScoringAPIError(f"Scoring API response has no valid credit_score: {raw_score!r}")
    score = int(max(MIN_SCORE, min(MAX_SCORE, round(raw_score))))

    remote_components = payload.get("component_scores") or {}
    if not isinstance(remote_components, Mapping):
        remote_components = {}
    values: Dict[str, int] = {"credit_age": REMOTE_CREDIT_AGE}
    for remote_name, (local_name, default) in COMPONENT_MAPPING.items():
        values[local_name] = _component(remote_components.get(remote_name), default)

    remote_loan = payload.get("loan_eligibility") or {}
    if not isinstance(remote_loan, Mapping):
        remote_loan = {}
    max_amount = max(_number(remote_loan.get("max_loan_amount"), DEFAULT_MAX_AMOUNT), 0.0)
    duration = max(int(_number(remote_loan.get("max_duration_months"), DEFAULT_DURATION_MONTHS)), 0)
    interest_rate = _number(remote_loan.get("interest_rate"), DEFAULT_INTEREST_RATE)
    eligible = remote_loan.get("eligible")
    if not isinstance(eligible, bool):
        eligible = max_amount > 0

    monthly_emi = _number(remote_loan.get("monthly_emi"), -1.0)
    if monthly_emi < 0:
        monthly_emi = calculate_emi(max_amount, interest_rate, duration)

    loan_eligibility = LoanEligibility(
        eligible=eligible,
        max_amount=max_amount,
        max_duration_months=duration,
        interest_rate=interest_rate,
        monthly_emi=monthly_emi,
        disposable_income=max(_number(remote_loan.get("disposable_income"), 0.0), 0.0),
    )

    return ScoreResult(
        score=score,
        category=categorize_score(score),
        components=ScoreComponents(**values),
        loan_eligibility=loan_eligibility,
        financial_summary=FinancialSummary(),
        previous_score=prior_score,
        score_change=score - prior_score if prior_score is not None else None,
        source="remote",
    )
