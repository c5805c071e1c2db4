"""Trust score engine - derives a bounded credit score from UPI payment records"""

import logging
import math
from typing import Any, List, Optional, Sequence, Tuple

from finupi_gateway.domain.adapters import normalize_record
from finupi_gateway.domain.exceptions import InvalidInputError, InvalidRecordError
from finupi_gateway.domain.loans import calculate_emi
from finupi_gateway.domain.models import (
    Direction,
    FinancialSummary,
    LoanEligibility,
    ScoreComponents,
    ScoreResult,
    TransactionMetrics,
    TransactionRecord,
)
from finupi_gateway.utils.date_utils import span_in_days

logger = logging.getLogger(__name__)

MIN_SCORE = 300
MAX_SCORE = 900

COMPONENT_WEIGHTS = {
    "payment_history": 0.35,
    "credit_utilization": 0.30,
    "credit_age": 0.15,
    "upi_activity": 0.10,
    "transaction_patterns": 0.10,
}

FAILED_PAYMENT_PENALTY = 5
UTILIZATION_HEALTHY_RATIO = 0.3
UTILIZATION_MAXED_RATIO = 1.0
CREDIT_AGE_SATURATION_DAYS = 365
ACTIVITY_SATURATION_PER_MONTH = 30
PATTERN_MIN_RECORDS = 3

# (lower bound, label), highest band first
SCORE_BANDS = [
    (800, "Excellent"),
    (740, "Very Good"),
    (670, "Good"),
    (580, "Fair"),
    (MIN_SCORE, "Poor"),
]

MIN_ELIGIBLE_SCORE = 580
MIN_LOAN_AMOUNT = 10_000
MAX_LOAN_CEILING = 100_000
MAX_INTEREST_RATE = 24.0
MIN_INTEREST_RATE = 10.0

# (lower bound, max term in months), highest band first
DURATION_STEPS = [
    (800, 36),
    (740, 24),
    (670, 12),
    (MIN_ELIGIBLE_SCORE, 6),
]


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _coefficient_of_variation(values: Sequence[float]) -> float:
    """Population std-dev over mean; 0.0 when the mean is zero"""
    if not values:
        return 0.0
    mean = math.fsum(values) / len(values)
    if mean <= 0:
        return 0.0
    variance = math.fsum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean


def normalize_transactions(
    transactions: Any, subject_id: str, log_skipped: bool = True
) -> Tuple[List[TransactionRecord], int]:
    """
    Normalize raw records, skipping invalid ones.

    Returns:
        (valid records, number of skipped records)

    Raises:
        InvalidInputError: If transactions is not a list or tuple
    """
    if not isinstance(transactions, (list, tuple)):
        raise InvalidInputError(
            f"transactions must be a list of records, got {type(transactions).__name__}"
        )

    records = []
    skipped = 0
    for index, raw in enumerate(transactions):
        try:
            records.append(normalize_record(raw, subject_id))
        except InvalidRecordError as e:
            skipped += 1
            if not log_skipped:
                continue
            logger.warning(
                "Skipping invalid transaction record",
                extra={"subject_id": subject_id, "record_index": index, "reason": str(e)},
            )
    return records, skipped


def aggregate_metrics(records: List[TransactionRecord], subject_id: str) -> TransactionMetrics:
    """
    Aggregate the subject's records into scoring metrics.

    Requirements:
    - Only SUCCESS records feed amounts, span, activity and patterns
    - FAILED/PENDING records only feed failed_or_pending_count
    - Self-transfers count as activity but move no money in or out
    - Result depends on the multiset of records, never on their order
    """
    outgoing: List[float] = []
    incoming: List[float] = []
    successful: List[TransactionRecord] = []
    counterparties = set()
    failed_or_pending = 0

    for record in records:
        direction = record.direction_for(subject_id)
        if direction == Direction.NONE:
            continue
        if not record.is_successful:
            failed_or_pending += 1
            continue

        successful.append(record)
        if direction == Direction.OUTGOING:
            outgoing.append(record.amount)
        elif direction == Direction.INCOMING:
            incoming.append(record.amount)

        counterparty = record.counterparty_for(subject_id)
        if counterparty is not None:
            counterparties.add(counterparty)

    timestamps = sorted(r.timestamp for r in successful)
    span_days = span_in_days(timestamps[0], timestamps[-1]) if timestamps else 0.0

    return TransactionMetrics(
        total_outgoing=math.fsum(sorted(outgoing)),
        total_incoming=math.fsum(sorted(incoming)),
        failed_or_pending_count=failed_or_pending,
        successful_count=len(successful),
        counterparty_count=len(counterparties),
        span_days=span_days,
        amounts=sorted(r.amount for r in successful),
        timestamps=timestamps,
    )


def score_payment_history(failed_or_pending_count: int) -> int:
    """100 minus a fixed penalty per failed or pending payment"""
    return int(_clamp(100 - FAILED_PAYMENT_PENALTY * failed_or_pending_count, 0, 100))


def score_credit_utilization(total_outgoing: float, total_incoming: float) -> int:
    """
    Map the outgoing/incoming ratio onto [0, 100].

    Thresholds:
    - ratio <= 0.3: 100 (saving most of what comes in)
    - ratio >= 1.0: 0 (spending everything, or nothing comes in at all)
    - linear in between
    """
    if total_incoming <= 0:
        return 0
    ratio = total_outgoing / total_incoming
    if ratio <= UTILIZATION_HEALTHY_RATIO:
        return 100
    if ratio >= UTILIZATION_MAXED_RATIO:
        return 0
    span = UTILIZATION_MAXED_RATIO - UTILIZATION_HEALTHY_RATIO
    return int(round(_clamp(100 * (UTILIZATION_MAXED_RATIO - ratio) / span, 0, 100)))


def score_credit_age(span_days: float) -> int:
    """Length of successful history, saturating at one year"""
    return int(round(_clamp(100 * span_days / CREDIT_AGE_SATURATION_DAYS, 0, 100)))


def score_upi_activity(successful_count: int, window_months: float) -> int:
    """Successful payments per 30-day window, saturating at 30"""
    per_month = successful_count / max(window_months, 1.0)
    return int(round(_clamp(100 * per_month / ACTIVITY_SATURATION_PER_MONTH, 0, 100)))


def score_transaction_patterns(amounts: Sequence[float], timestamps: Sequence) -> int:
    """
    Reward predictable amounts and intervals.

    Half the score comes from the amount coefficient of variation, half from
    the inter-arrival interval coefficient of variation; each CV is capped at 1.
    """
    if len(amounts) < PATTERN_MIN_RECORDS:
        return 0

    ordered = sorted(timestamps)
    intervals = sorted(
        (later - earlier).total_seconds() for earlier, later in zip(ordered, ordered[1:])
    )
    amount_cv = min(_coefficient_of_variation(sorted(amounts)), 1.0)
    interval_cv = min(_coefficient_of_variation(intervals), 1.0)
    return int(round(_clamp(100 - 50 * amount_cv - 50 * interval_cv, 0, 100)))


def calculate_components(metrics: TransactionMetrics) -> ScoreComponents:
    return ScoreComponents(
        payment_history=score_payment_history(metrics.failed_or_pending_count),
        credit_utilization=score_credit_utilization(metrics.total_outgoing, metrics.total_incoming),
        credit_age=score_credit_age(metrics.span_days),
        upi_activity=score_upi_activity(metrics.successful_count, metrics.window_months),
        transaction_patterns=score_transaction_patterns(metrics.amounts, metrics.timestamps),
    )


def combine_components(components: ScoreComponents) -> int:
    """
    Weighted average of the components mapped onto the 300-900 range.

        score = 300 + 6 * sum(weight_i * component_i)

    Weights sum to 1.0, so a perfect 100 on every component yields 900.
    """
    weighted = math.fsum(
        weight * getattr(components, name) for name, weight in COMPONENT_WEIGHTS.items()
    )
    raw = MIN_SCORE + (MAX_SCORE - MIN_SCORE) / 100 * weighted
    if not math.isfinite(raw):
        return MIN_SCORE
    return int(_clamp(round(raw), MIN_SCORE, MAX_SCORE))


def categorize_score(score: int) -> str:
    """Band label for a score; each band includes its lower bound"""
    for lower_bound, label in SCORE_BANDS:
        if score >= lower_bound:
            return label
    return SCORE_BANDS[-1][1]


def max_duration_for(score: int) -> int:
    for lower_bound, months in DURATION_STEPS:
        if score >= lower_bound:
            return months
    return 0


def determine_loan_eligibility(score: int, metrics: Optional[TransactionMetrics] = None) -> LoanEligibility:
    """
    Map a score onto loan terms.

    - eligible from 580 upwards
    - max amount grows linearly from 10,000 at 580 to the 100,000 ceiling at 900,
      rounded down to the nearest 1,000
    - interest rate falls linearly from 24% at 580 to the 10% floor at 900
    - max term steps up per band (6 / 12 / 24 / 36 months)
    - EMI is the amortized repayment of max amount over max term
    """
    score_range = MAX_SCORE - MIN_ELIGIBLE_SCORE
    progress = _clamp((score - MIN_ELIGIBLE_SCORE) / score_range, 0.0, 1.0)

    interest_rate = round(
        max(MAX_INTEREST_RATE - progress * (MAX_INTEREST_RATE - MIN_INTEREST_RATE), MIN_INTEREST_RATE),
        2,
    )

    disposable_income = 0.0
    if metrics is not None:
        disposable_income = round(max(metrics.avg_monthly_inflow - metrics.avg_monthly_outflow, 0.0), 2)

    eligible = score >= MIN_ELIGIBLE_SCORE
    if not eligible:
        return LoanEligibility(
            eligible=False,
            max_amount=0.0,
            max_duration_months=0,
            interest_rate=interest_rate,
            monthly_emi=0.0,
            disposable_income=disposable_income,
        )

    amount = MIN_LOAN_AMOUNT + progress * (MAX_LOAN_CEILING - MIN_LOAN_AMOUNT)
    max_amount = float(min(math.floor(amount / 1000) * 1000, MAX_LOAN_CEILING))
    max_duration = max_duration_for(score)

    return LoanEligibility(
        eligible=True,
        max_amount=max_amount,
        max_duration_months=max_duration,
        interest_rate=interest_rate,
        monthly_emi=calculate_emi(max_amount, interest_rate, max_duration),
        disposable_income=disposable_income,
    )


def summarize_cash_flow(metrics: TransactionMetrics) -> FinancialSummary:
    inflow = round(metrics.avg_monthly_inflow, 2)
    outflow = round(metrics.avg_monthly_outflow, 2)
    return FinancialSummary(
        avg_monthly_inflow=inflow,
        avg_monthly_outflow=outflow,
        savings_trend="Positive" if inflow >= outflow else "Negative",
    )


def floor_result(
    skipped_records: int = 0,
    excluded_records: int = 0,
    prior_score: Optional[int] = None,
) -> ScoreResult:
    """Deterministic result for subjects without any successful activity"""
    return ScoreResult(
        score=MIN_SCORE,
        category=categorize_score(MIN_SCORE),
        components=ScoreComponents(),
        loan_eligibility=determine_loan_eligibility(MIN_SCORE),
        financial_summary=FinancialSummary(),
        skipped_records=skipped_records,
        excluded_records=excluded_records,
        previous_score=prior_score,
        score_change=MIN_SCORE - prior_score if prior_score is not None else None,
    )


def compute_score(
    transactions: Sequence[Any],
    subject_id: str,
    prior_score: Optional[int] = None,
) -> ScoreResult:
    """
    Main entry point: turn UPI payment records into a trust score.

    Records where the subject is neither sender nor receiver are excluded and
    counted. Records that cannot be parsed are skipped and counted. Subjects
    with no successful activity get the floor score (300, Poor, not eligible).

    prior_score is only echoed back with the change; it never affects the score.

    Raises:
        InvalidInputError: If transactions is not a list or tuple
    """
    records, skipped = normalize_transactions(transactions, subject_id)

    subject_records = [r for r in records if r.direction_for(subject_id) != Direction.NONE]
    excluded = len(records) - len(subject_records)

    metrics = aggregate_metrics(subject_records, subject_id)
    if metrics.successful_count == 0:
        return floor_result(skipped, excluded, prior_score)

    components = calculate_components(metrics)
    score = combine_components(components)

    return ScoreResult(
        score=score,
        category=categorize_score(score),
        components=components,
        loan_eligibility=determine_loan_eligibility(score, metrics),
        financial_summary=summarize_cash_flow(metrics),
        skipped_records=skipped,
        excluded_records=excluded,
        previous_score=prior_score,
        score_change=score - prior_score if prior_score is not None else None,
    )


def recent_transactions(
    transactions: Sequence[Any],
    subject_id: str,
    limit: int = 5,
) -> List[TransactionRecord]:
    """Most recent N subject records, newest first (invalid and third-party records dropped)"""
    records, _ = normalize_transactions(transactions, subject_id, log_skipped=False)
    subject_records = [r for r in records if r.direction_for(subject_id) != Direction.NONE]
    ordered = sorted(
        subject_records,
        key=lambda r: (r.timestamp, r.reference or "", r.sender_id, r.receiver_id, r.amount),
        reverse=True,
    )
    return ordered[:limit]
