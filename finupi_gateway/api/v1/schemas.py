"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Any, Dict, List, Optional


class ScoreRequest(BaseModel):
    """Request body for POST /v1/score"""

    subject_id: str = Field(..., min_length=1, description="Subject's UPI handle")
    transactions: List[Any] = Field(default_factory=list, description="Raw payment records in any supported shape")
    prior_score: Optional[int] = Field(None, description="Previously reported score, echoed with the change")


class ScoreComponentsSchema(BaseModel):
    payment_history: int
    credit_utilization: int
    credit_age: int
    upi_activity: int
    transaction_patterns: int


class LoanEligibilitySchema(BaseModel):
    eligible: bool
    max_amount: float
    max_duration_months: int
    interest_rate: float
    monthly_emi: float
    disposable_income: float
    suggested_amount: int = 0


class FinancialSummarySchema(BaseModel):
    avg_monthly_inflow: float
    avg_monthly_outflow: float
    savings_trend: str


class TransactionSchema(BaseModel):
    """Normalized payment record"""

    reference: Optional[str] = None
    timestamp: datetime
    sender_id: str
    receiver_id: str
    amount: float
    status: str
    category: str
    direction: str


class ScoreResponse(BaseModel):
    """Response for POST /v1/score"""

    score_id: str
    subject_id: str
    score: int
    category: str
    message: str
    components: ScoreComponentsSchema
    loan_eligibility: LoanEligibilitySchema
    financial_summary: FinancialSummarySchema
    recommendations: List[str]
    recent_transactions: List[TransactionSchema]
    skipped_records: int
    excluded_records: int
    previous_score: Optional[int] = None
    score_change: Optional[int] = None
    source: str


class HistoryItem(BaseModel):
    """Single score in history"""

    score_id: str
    score: int
    category: str
    eligible: bool
    source: str
    components: Dict[str, int]
    created_at: str


class HistoryResponse(BaseModel):
    """Response for GET /v1/score/history"""

    subject_id: str
    scores: List[HistoryItem]


class LoanQuoteRequest(BaseModel):
    """Request body for POST /v1/loan/quote"""

    subject_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0, description="Requested principal")
    term_months: int = Field(..., gt=0, description="Requested term in months")
    purpose: str = Field(..., min_length=1)


class InstallmentSchema(BaseModel):
    """Single installment in a repayment schedule"""

    due_date: date
    emi: float
    principal: float
    interest: float
    balance: float


class LoanQuoteResponse(BaseModel):
    """Response for POST /v1/loan/quote"""

    subject_id: str
    score_id: str
    amount: float
    term_months: int
    purpose: str
    interest_rate: float
    monthly_emi: float
    total_repayable: float
    total_interest: float
    schedule: List[InstallmentSchema]
