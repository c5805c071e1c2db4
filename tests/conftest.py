"""Pytest fixtures for testing"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("SCORE_SOURCE", "local")

import pytest
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from finupi_gateway.api.main import create_app
from finupi_gateway.infrastructure.database.models import Base
from finupi_gateway.infrastructure.database.session import get_db
from finupi_gateway.domain.models import TransactionCategory, TransactionRecord, TransactionStatus


SUBJECT = "user@upi"

# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_record(
    day: float,
    amount: float,
    sender: str,
    receiver: str,
    status: TransactionStatus = TransactionStatus.SUCCESS,
    category: TransactionCategory = TransactionCategory.P2P,
    reference: str | None = None,
) -> TransactionRecord:
    """Build a normalized record `day` days after 2025-01-01 09:00 UTC"""
    return TransactionRecord(
        timestamp=datetime(2025, 1, 1, 9, tzinfo=timezone.utc) + timedelta(days=day),
        sender_id=sender,
        receiver_id=receiver,
        amount=amount,
        status=status,
        category=category,
        reference=reference,
    )


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def app(db: Session):
    """FastAPI app bound to the test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Create FastAPI test client with test database"""
    return TestClient(app)


@pytest.fixture
def upi_statement() -> List[Dict[str, Any]]:
    """UPI statement export for user@upi, including third-party, failed and pending rows"""
    rows = [
        ("2025-01-01T09:00:00", "user@upi", "alice@upi", 1000, "SUCCESS", "P2P"),
        ("2025-01-02T10:30:00", "alice@upi", "bob@upi", 500, "SUCCESS", "P2P"),
        ("2025-01-03T12:00:00", "charlie@upi", "user@upi", 100, "SUCCESS", "P2P"),
        ("2025-01-04T08:15:00", "user@upi", "merchant@upi", 250, "SUCCESS", "P2M"),
        ("2025-01-05T19:45:00", "user@upi", "alice@upi", 300, "FAILED", "P2P"),
        ("2025-01-06T09:00:00", "alice@upi", "user@upi", 300, "SUCCESS", "P2P"),
        ("2025-01-08T11:00:00", "user@upi", "alice@upi", 700, "SUCCESS", "P2P"),
        ("2025-01-09T11:00:00", "alice@upi", "user@upi", 700, "SUCCESS", "P2P"),
        ("2025-01-10T14:20:00", "charlie@upi", "user@upi", 400, "SUCCESS", "P2P"),
        ("2025-01-12T16:00:00", "user@upi", "david@upi", 600, "SUCCESS", "P2P"),
        ("2025-01-13T09:30:00", "david@upi", "user@upi", 250, "SUCCESS", "P2P"),
        ("2025-01-14T10:00:00", "user@upi", "charlie@upi", 100, "PENDING", "P2P"),
        ("2025-01-15T13:00:00", "merchant@upi", "user@upi", 200, "SUCCESS", "P2M"),
        ("2025-01-16T17:00:00", "user@upi", "user@upi", 0, "SUCCESS", "P2P"),
        ("2025-01-18T09:00:00", "david@upi", "user@upi", 450, "SUCCESS", "P2P"),
    ]
    return [
        {
            "Timestamp": ts,
            "Sender UPI ID": sender,
            "Receiver UPI ID": receiver,
            "Amount (INR)": amount,
            "Status": status,
            "To Type": to_type,
        }
        for ts, sender, receiver, amount, status, to_type in rows
    ]


@pytest.fixture
def steady_earner() -> List[TransactionRecord]:
    """A year of monthly salary credits and mid-month rent debits at 30% of income"""
    records = []
    for month in range(1, 13):
        records.append(
            TransactionRecord(
                timestamp=datetime(2024, month, 1, 9, tzinfo=timezone.utc),
                sender_id="employer@upi",
                receiver_id=SUBJECT,
                amount=30000,
                status=TransactionStatus.SUCCESS,
                reference=f"salary_{month}",
            )
        )
        records.append(
            TransactionRecord(
                timestamp=datetime(2024, month, 15, 18, tzinfo=timezone.utc),
                sender_id=SUBJECT,
                receiver_id="landlord@upi",
                amount=9000,
                status=TransactionStatus.SUCCESS,
                reference=f"rent_{month}",
            )
        )
    return records


@pytest.fixture
def overspender() -> List[TransactionRecord]:
    """Two months of spending well beyond income with repeated failed payments"""
    records = [make_record(day * 30, 5000, "employer@upi", SUBJECT) for day in range(3)]
    records += [make_record(day * 6 + 1, 4000, SUBJECT, "shop@upi") for day in range(10)]
    records += [
        make_record(day * 10 + 2, 2500, SUBJECT, "lender@upi", status=TransactionStatus.FAILED)
        for day in range(6)
    ]
    return records


def serialize(records: List[TransactionRecord]) -> List[Dict[str, Any]]:
    """Render records in the canonical JSON shape accepted by POST /v1/score"""
    return [
        {
            "timestamp": r.timestamp.isoformat(),
            "sender_id": r.sender_id,
            "receiver_id": r.receiver_id,
            "amount": r.amount,
            "status": r.status.value,
            "category": r.category.value,
            "reference": r.reference,
        }
        for r in records
    ]


@pytest.fixture
def make_txn():
    """Factory for normalized records relative to 2025-01-01"""
    return make_record


@pytest.fixture
def to_payload():
    """Serializer from records to the POST /v1/score JSON shape"""
    return serialize
