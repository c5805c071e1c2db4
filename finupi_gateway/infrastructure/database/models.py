"""SQLAlchemy ORM models for the score history"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import Column, Boolean, DateTime, Integer, Text, JSON
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class ScoreRecord(Base):
    """Trust score computed for a subject"""

    __tablename__ = "score_record"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    subject_id = Column(Text, nullable=False, index=True)
    score = Column(Integer, nullable=False)
    category = Column(Text, nullable=False)
    eligible = Column(Boolean, nullable=False)
    components = Column(JSON, nullable=False)
    loan_eligibility = Column(JSON, nullable=False)
    source = Column(Text, nullable=False, default="local")
    skipped_records = Column(Integer, nullable=False, default=0)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )
