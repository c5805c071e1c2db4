"""POST /v1/score - UPI trust score endpoint"""

import time
import logging
from dataclasses import asdict
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from finupi_gateway.api.v1.schemas import (
    FinancialSummarySchema,
    LoanEligibilitySchema,
    ScoreComponentsSchema,
    ScoreRequest,
    ScoreResponse,
    TransactionSchema,
)
from finupi_gateway.api.dependencies import get_request_id, get_score_service
from finupi_gateway.config import settings
from finupi_gateway.infrastructure.database.session import get_db
from finupi_gateway.infrastructure.database.repositories import ScoreRepository
from finupi_gateway.services.score_service import ScoreService
from finupi_gateway.domain.scoring import recent_transactions
from finupi_gateway.domain.loans import suggest_initial_amount
from finupi_gateway.domain.recommendations import improvement_suggestions, score_message
from finupi_gateway.domain.exceptions import InvalidInputError, ScoringAPIError
from finupi_gateway.infrastructure.observability.metrics import record_score
from finupi_gateway.infrastructure.observability.logging import log_score

router = APIRouter()


@router.post("/score", response_model=ScoreResponse)
async def create_score(
    request_body: ScoreRequest,
    request: Request,
    db: Session = Depends(get_db),
    score_service: ScoreService = Depends(get_score_service),
):
    """
    Compute a trust score from UPI payment records.

    Flow:
    1. Resolve the score (local engine or remote API, per configuration)
    2. Derive message, suggestions and the most recent records
    3. Persist the score to the subject's history
    4. Return score, components and loan eligibility
    """
    start_time = time.time()
    request_id = get_request_id(request)
    subject_id = request_body.subject_id

    try:
        # 1. Resolve score
        result = await score_service.score(subject_id, request_body.transactions, request_body.prior_score)

        # 2. Presentation details
        recent = recent_transactions(
            request_body.transactions, subject_id, limit=settings.recent_transactions_limit
        )

        # 3. Persist score
        score_repo = ScoreRepository(db)
        db_score = score_repo.create_score(subject_id, result)
        db.commit()

        # Record metrics and logs
        duration_ms = (time.time() - start_time) * 1000
        record_score(result.category, result.source, result.loan_eligibility.eligible, result.skipped_records)
        log_score(
            request_id,
            subject_id,
            result.score,
            result.category,
            result.loan_eligibility.eligible,
            result.skipped_records,
            result.source,
            duration_ms,
        )

        return ScoreResponse(
            score_id=str(db_score.id),
            subject_id=subject_id,
            score=result.score,
            category=result.category,
            message=score_message(result.score),
            components=ScoreComponentsSchema(**asdict(result.components)),
            loan_eligibility=LoanEligibilitySchema(
                **asdict(result.loan_eligibility),
                suggested_amount=suggest_initial_amount(result.loan_eligibility.max_amount),
            ),
            financial_summary=FinancialSummarySchema(**asdict(result.financial_summary)),
            recommendations=improvement_suggestions(result.score, result.components),
            recent_transactions=[
                TransactionSchema(
                    reference=t.reference,
                    timestamp=t.timestamp,
                    sender_id=t.sender_id,
                    receiver_id=t.receiver_id,
                    amount=t.amount,
                    status=t.status.value,
                    category=t.category.value,
                    direction=t.direction_for(subject_id).value,
                )
                for t in recent
            ],
            skipped_records=result.skipped_records,
            excluded_records=result.excluded_records,
            previous_score=result.previous_score,
            score_change=result.score_change,
            source=result.source,
        )

    except ScoringAPIError as e:
        db.rollback()
        logging.error(f"Scoring API error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Scoring service unavailable")

    except InvalidInputError as e:
        db.rollback()
        logging.warning(f"Invalid input: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))
