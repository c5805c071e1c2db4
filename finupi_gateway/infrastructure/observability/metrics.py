"""Prometheus metrics for monitoring score distribution, eligibility and remote scoring health"""

from prometheus_client import Counter, Histogram

# Score metrics
score_counter = Counter(
    "finupi_score_total",
    "Total trust scores computed",
    ["category", "source"],  # Excellent | Very Good | Good | Fair | Poor
)

loan_eligibility_counter = Counter(
    "finupi_loan_eligibility_total",
    "Loan eligibility outcomes",
    ["outcome"],  # eligible | ineligible
)

skipped_records_counter = Counter(
    "finupi_skipped_records_total",
    "Transaction records skipped as invalid",
)

# Remote scoring API metrics
scoring_api_failures_counter = Counter(
    "scoring_api_failures_total",
    "Failed remote scoring API calls",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_score(category: str, source: str, eligible: bool, skipped_records: int) -> None:
    """Record score metrics for monitoring band distribution and eligibility rates"""
    score_counter.labels(category=category, source=source).inc()
    loan_eligibility_counter.labels(outcome="eligible" if eligible else "ineligible").inc()
    if skipped_records:
        skipped_records_counter.inc(skipped_records)
