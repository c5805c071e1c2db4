"""POST /v1/loan/quote - Loan quote within the bounds of the latest score"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from finupi_gateway.api.v1.schemas import InstallmentSchema, LoanQuoteRequest, LoanQuoteResponse
from finupi_gateway.infrastructure.database.session import get_db
from finupi_gateway.infrastructure.database.repositories import ScoreRepository, to_loan_eligibility
from finupi_gateway.domain.loans import (
    calculate_emi,
    generate_repayment_schedule,
    validate_loan_application,
)
from finupi_gateway.domain.exceptions import LoanValidationError

router = APIRouter()


@router.post("/loan/quote", response_model=LoanQuoteResponse)
def create_loan_quote(request_body: LoanQuoteRequest, db: Session = Depends(get_db)):
    """
    Quote a loan against the subject's most recent score.

    Returns:
        Interest rate, EMI, totals and the monthly amortization schedule
    """
    score_repo = ScoreRepository(db)
    latest = score_repo.get_latest_score(request_body.subject_id)

    if not latest:
        raise HTTPException(status_code=404, detail="No score on record for subject")

    eligibility = to_loan_eligibility(latest)
    try:
        validate_loan_application(
            request_body.amount,
            request_body.term_months,
            request_body.purpose,
            eligibility,
        )
    except LoanValidationError as e:
        logging.info(f"Loan quote rejected: {e}", extra={"subject_id": request_body.subject_id})
        raise HTTPException(status_code=422, detail=str(e))

    rate = eligibility.interest_rate
    emi = calculate_emi(request_body.amount, rate, request_body.term_months)
    schedule = generate_repayment_schedule(request_body.amount, rate, request_body.term_months)
    total_repayable = round(sum(inst.emi for inst in schedule), 2)

    return LoanQuoteResponse(
        subject_id=request_body.subject_id,
        score_id=str(latest.id),
        amount=request_body.amount,
        term_months=request_body.term_months,
        purpose=request_body.purpose,
        interest_rate=rate,
        monthly_emi=emi,
        total_repayable=total_repayable,
        total_interest=round(total_repayable - request_body.amount, 2),
        schedule=[
            InstallmentSchema(
                due_date=inst.due_date,
                emi=inst.emi,
                principal=inst.principal,
                interest=inst.interest,
                balance=inst.balance,
            )
            for inst in schedule
        ],
    )
