"""Data access layer for score history"""

from dataclasses import asdict
from typing import List, Optional
from sqlalchemy.orm import Session
from finupi_gateway.infrastructure.database.models import ScoreRecord
from finupi_gateway.domain.models import LoanEligibility, ScoreResult


class ScoreRepository:
    """Repository for computed trust scores"""

    def __init__(self, db: Session):
        self.db = db

    def create_score(self, subject_id: str, result: ScoreResult) -> ScoreRecord:
        """Persist a score result to database"""
        db_score = ScoreRecord(
            subject_id=subject_id,
            score=result.score,
            category=result.category,
            eligible=result.loan_eligibility.eligible,
            components=asdict(result.components),
            loan_eligibility=asdict(result.loan_eligibility),
            source=result.source,
            skipped_records=result.skipped_records,
        )
        self.db.add(db_score)
        self.db.flush()  # Get ID without committing
        return db_score

    def get_scores_by_subject(self, subject_id: str, limit: int = 20) -> List[ScoreRecord]:
        """Fetch recent scores for a subject, newest first"""
        return (
            self.db.query(ScoreRecord)
            .filter(ScoreRecord.subject_id == subject_id)
            .order_by(ScoreRecord.created_at.desc())
            .limit(limit)
            .all()
        )

    def get_latest_score(self, subject_id: str) -> Optional[ScoreRecord]:
        scores = self.get_scores_by_subject(subject_id, limit=1)
        return scores[0] if scores else None


def to_loan_eligibility(record: ScoreRecord) -> LoanEligibility:
    """Rebuild the stored loan terms of a score record"""
    return LoanEligibility(**record.loan_eligibility)
