"""EMI calculation, amortization schedules and loan-application bounds"""

import math
from datetime import date
from typing import List

from finupi_gateway.domain.exceptions import LoanValidationError, NotEligibleError
from finupi_gateway.domain.models import LoanEligibility, RepaymentInstallment
from finupi_gateway.utils.date_utils import add_months

MIN_LOAN_AMOUNT = 1_000
MIN_TERM_MONTHS = 3
MIN_SUGGESTED_AMOUNT = 25_000

LOAN_PURPOSES = (
    "Medical Expenses",
    "Education",
    "Home Renovation",
    "Debt Consolidation",
    "Wedding",
    "Travel",
    "Electronics Purchase",
    "Vehicle Purchase",
    "Business",
    "Other",
)


def calculate_emi(principal: float, annual_rate: float, months: int) -> float:
    """
    Equated monthly installment for an amortizing loan.

        emi = P * r * (1 + r)^n / ((1 + r)^n - 1),  r = annual_rate / 12 / 100

    Degenerate inputs (non-positive principal, rate or term) and non-finite
    results yield 0.0 rather than an error.

    Example:
        calculate_emi(50000, 14, 12) -> ~4489.35
    """
    if principal <= 0 or months <= 0:
        return 0.0

    r = annual_rate / 12 / 100
    if not r > 0:
        return 0.0

    try:
        growth = math.pow(1 + r, months)
        emi = principal * r * growth / (growth - 1)
    except (OverflowError, ZeroDivisionError):
        return 0.0

    if not math.isfinite(emi):
        return 0.0
    return round(emi, 2)


def generate_repayment_schedule(
    principal: float,
    annual_rate: float,
    months: int,
    start_date: date | None = None,
) -> List[RepaymentInstallment]:
    """
    Generate a monthly amortization schedule.

    Requirements:
    - One installment per month, first due one month after start_date
    - Each installment splits the EMI into interest on the outstanding
      balance and principal repaid
    - Last installment absorbs rounding so principal parts sum to the principal

    Args:
        principal: Loan amount disbursed
        annual_rate: Interest rate in percent per year
        months: Loan term in months
        start_date: Disbursement date (default: today)

    Returns:
        List of RepaymentInstallment, empty when the loan math is degenerate
    """
    emi = calculate_emi(principal, annual_rate, months)
    if emi == 0.0:
        return []

    if start_date is None:
        start_date = date.today()

    r = annual_rate / 12 / 100
    balance = round(principal, 2)
    schedule = []
    for i in range(1, months + 1):
        interest = round(balance * r, 2)
        if i == months:
            principal_part = balance
            payment = round(principal_part + interest, 2)
        else:
            principal_part = round(emi - interest, 2)
            payment = emi
        balance = round(balance - principal_part, 2)

        schedule.append(
            RepaymentInstallment(
                due_date=add_months(start_date, i),
                emi=payment,
                principal=principal_part,
                interest=interest,
                balance=balance,
            )
        )

    return schedule


def validate_loan_application(
    amount: float,
    term_months: int,
    purpose: str,
    eligibility: LoanEligibility,
) -> None:
    """
    Check a loan request against the terms unlocked by the subject's score.

    Raises:
        NotEligibleError: Score does not qualify for a loan
        LoanValidationError: Amount, term or purpose out of bounds
    """
    if not eligibility.eligible or eligibility.max_amount <= 0:
        raise NotEligibleError("Score does not qualify for a loan")

    if amount < MIN_LOAN_AMOUNT or amount > eligibility.max_amount:
        raise LoanValidationError(
            f"Loan amount should be between {MIN_LOAN_AMOUNT:,} and {eligibility.max_amount:,.0f}"
        )

    if term_months < MIN_TERM_MONTHS or term_months > eligibility.max_duration_months:
        raise LoanValidationError(
            f"Loan term should be between {MIN_TERM_MONTHS} and {eligibility.max_duration_months} months"
        )

    if purpose not in LOAN_PURPOSES:
        raise LoanValidationError(f"Unknown loan purpose: {purpose!r}")


def suggest_initial_amount(max_amount: float) -> int:
    """Half the maximum rounded down to 1,000, at least 25,000 but never above the maximum"""
    if max_amount <= 0:
        return 0
    half = int(max_amount * 0.5 // 1000) * 1000
    return int(min(max(MIN_SUGGESTED_AMOUNT, half), max_amount))
