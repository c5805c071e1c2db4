"""GET /v1/score/history - Fetch a subject's score history"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from finupi_gateway.api.v1.schemas import HistoryResponse, HistoryItem
from finupi_gateway.config import settings
from finupi_gateway.infrastructure.database.session import get_db
from finupi_gateway.infrastructure.database.repositories import ScoreRepository

router = APIRouter()


@router.get("/score/history", response_model=HistoryResponse)
def get_score_history(
    subject_id: str = Query(..., min_length=1, description="Subject's UPI handle"),
    db: Session = Depends(get_db),
):
    """
    Retrieve recent trust scores for a subject.

    Returns:
        Scores newest first, with category, eligibility and components
    """
    score_repo = ScoreRepository(db)
    scores = score_repo.get_scores_by_subject(subject_id, limit=settings.history_limit)

    history_items = [
        HistoryItem(
            score_id=str(s.id),
            score=s.score,
            category=s.category,
            eligible=s.eligible,
            source=s.source,
            components=s.components,
            created_at=s.created_at.isoformat(),
        )
        for s in scores
    ]

    return HistoryResponse(subject_id=subject_id, scores=history_items)
