"""Domain models - pure Python dataclasses representing scoring entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class TransactionStatus(str, Enum):
    """Settlement state of a UPI payment"""

    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    PENDING = "PENDING"


class TransactionCategory(str, Enum):
    """Counterparty kind: person-to-person or person-to-merchant"""

    P2P = "P2P"
    P2M = "P2M"
    OTHER = "OTHER"


class Direction(str, Enum):
    """Direction of a record from the subject's point of view"""

    OUTGOING = "outgoing"
    INCOMING = "incoming"
    SELF = "self"
    NONE = "none"


@dataclass(frozen=True)
class TransactionRecord:
    """Normalized UPI payment event"""

    timestamp: datetime
    sender_id: str
    receiver_id: str
    amount: float
    status: TransactionStatus
    category: TransactionCategory = TransactionCategory.OTHER
    reference: Optional[str] = None

    @property
    def is_successful(self) -> bool:
        return self.status == TransactionStatus.SUCCESS

    def direction_for(self, subject_id: str) -> Direction:
        """Classify the record relative to the subject's UPI handle"""
        is_sender = self.sender_id == subject_id
        is_receiver = self.receiver_id == subject_id
        if is_sender and is_receiver:
            return Direction.SELF
        if is_sender:
            return Direction.OUTGOING
        if is_receiver:
            return Direction.INCOMING
        return Direction.NONE

    def counterparty_for(self, subject_id: str) -> Optional[str]:
        direction = self.direction_for(subject_id)
        if direction == Direction.OUTGOING:
            return self.receiver_id
        if direction == Direction.INCOMING:
            return self.sender_id
        return None


@dataclass
class TransactionMetrics:
    """Aggregates over the subject's records used for component scoring"""

    total_outgoing: float
    total_incoming: float
    failed_or_pending_count: int
    successful_count: int
    counterparty_count: int
    span_days: float
    amounts: List[float] = field(default_factory=list)
    timestamps: List[datetime] = field(default_factory=list)

    @property
    def window_months(self) -> float:
        """Number of 30-day windows covered, never less than one"""
        return max(self.span_days / 30.0, 1.0)

    @property
    def avg_monthly_inflow(self) -> float:
        return self.total_incoming / self.window_months

    @property
    def avg_monthly_outflow(self) -> float:
        return self.total_outgoing / self.window_months


@dataclass
class ScoreComponents:
    """Five sub-scores, each an integer in [0, 100]"""

    payment_history: int = 0
    credit_utilization: int = 0
    credit_age: int = 0
    upi_activity: int = 0
    transaction_patterns: int = 0


@dataclass
class LoanEligibility:
    """Loan terms unlocked by a score"""

    eligible: bool
    max_amount: float
    max_duration_months: int
    interest_rate: float
    monthly_emi: float
    disposable_income: float


@dataclass
class FinancialSummary:
    """Monthly cash-flow view of the subject's successful activity"""

    avg_monthly_inflow: float = 0.0
    avg_monthly_outflow: float = 0.0
    savings_trend: str = "Positive"


@dataclass
class ScoreResult:
    """Output of the score engine"""

    score: int
    category: str
    components: ScoreComponents
    loan_eligibility: LoanEligibility
    financial_summary: FinancialSummary = field(default_factory=FinancialSummary)
    skipped_records: int = 0
    excluded_records: int = 0
    previous_score: Optional[int] = None
    score_change: Optional[int] = None
    source: str = "local"


@dataclass
class RepaymentInstallment:
    """Single monthly payment in an amortizing loan schedule"""

    due_date: date
    emi: float
    principal: float
    interest: float
    balance: float
