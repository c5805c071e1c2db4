"""Integration tests for API endpoints"""

import pytest
from unittest.mock import AsyncMock, MagicMock
from fastapi.testclient import TestClient
from finupi_gateway.api.dependencies import get_score_service
from finupi_gateway.domain.exceptions import ScoringAPIError
from finupi_gateway.services.score_service import ScoreService

SUBJECT = "user@upi"


@pytest.fixture
def remote_client() -> MagicMock:
    """Remote scoring API client double"""
    client = MagicMock()
    client.get_credit_score = AsyncMock()
    return client


@pytest.fixture
def remote_app(app, remote_client):
    """App whose scores come from the remote API only"""
    app.dependency_overrides[get_score_service] = lambda: ScoreService(remote_client, source="remote")
    return app


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["score_source"] == "local"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "finupi_score_total" in response.text


def test_request_id_header(client: TestClient):
    """Caller request IDs are echoed, missing ones are minted"""
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"

    response = client.get("/health")
    assert response.headers["X-Request-ID"]


def test_score_endpoint_statement(client: TestClient, upi_statement):
    """Test POST /v1/score with a UPI statement export"""
    response = client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": upi_statement})

    assert response.status_code == 200
    data = response.json()
    assert 300 <= data["score"] <= 900
    assert data["category"] == "Poor"
    assert data["excluded_records"] == 1
    assert data["skipped_records"] == 0
    assert data["source"] == "local"
    assert data["score_id"]
    assert data["loan_eligibility"]["eligible"] is False
    assert data["loan_eligibility"]["suggested_amount"] == 0
    assert len(data["recommendations"]) >= 1
    assert len(data["recent_transactions"]) == 5
    assert data["recent_transactions"][0]["amount"] == 450
    assert data["recent_transactions"][0]["direction"] == "incoming"


def test_score_endpoint_good_subject(client: TestClient, steady_earner, to_payload):
    """Test POST /v1/score with a strong history"""
    response = client.post(
        "/v1/score",
        json={"subject_id": SUBJECT, "transactions": to_payload(steady_earner), "prior_score": 700},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["score"] >= 740
    assert data["loan_eligibility"]["eligible"] is True
    assert data["loan_eligibility"]["monthly_emi"] > 0
    assert data["loan_eligibility"]["suggested_amount"] >= 25000
    assert data["previous_score"] == 700
    assert data["score_change"] == data["score"] - 700


def test_score_endpoint_empty(client: TestClient):
    """Empty history is a floor score, not an error"""
    response = client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": []})

    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 300
    assert data["category"] == "Poor"
    assert data["loan_eligibility"]["eligible"] is False
    assert data["loan_eligibility"]["monthly_emi"] == 0


def test_score_endpoint_skips_invalid_record(client: TestClient, upi_statement):
    """A single malformed record is skipped, not fatal"""
    upi_statement[0]["Amount (INR)"] = "lots"

    response = client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": upi_statement})

    assert response.status_code == 200
    assert response.json()["skipped_records"] == 1


def test_score_endpoint_skips_signaling_nan_amount(client: TestClient, upi_statement):
    upi_statement[3]["Amount (INR)"] = "sNaN"

    response = client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": upi_statement})

    assert response.status_code == 200
    assert response.json()["skipped_records"] == 1


@pytest.mark.parametrize("transactions", [{"Amount (INR)": 10}, "not a list", 7])
def test_score_endpoint_rejects_non_list(client: TestClient, transactions):
    response = client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": transactions})
    assert response.status_code == 422


def test_score_endpoint_remote_unavailable(remote_app, remote_client):
    """Remote scoring failures surface as 503 when no fallback is configured"""
    remote_client.get_credit_score.side_effect = ScoringAPIError("timeout")

    response = TestClient(remote_app).post("/v1/score", json={"subject_id": SUBJECT, "transactions": []})

    assert response.status_code == 503


def test_score_endpoint_remote_score(remote_app, remote_client):
    remote_client.get_credit_score.return_value = {
        "credit_score": 745,
        "loan_eligibility": {"eligible": True, "max_loan_amount": 50000, "max_duration_months": 12, "interest_rate": 14},
    }

    response = TestClient(remote_app).post("/v1/score", json={"subject_id": SUBJECT, "transactions": []})

    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "remote"
    assert data["score"] == 745
    assert data["category"] == "Very Good"
    assert 4400 < data["loan_eligibility"]["monthly_emi"] < 4600


def test_get_history_endpoint(client: TestClient, upi_statement, steady_earner, to_payload):
    """Test GET /v1/score/history"""
    first = client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": upi_statement}).json()
    second = client.post(
        "/v1/score", json={"subject_id": SUBJECT, "transactions": to_payload(steady_earner)}
    ).json()
    client.post("/v1/score", json={"subject_id": "someone@upi", "transactions": []})

    response = client.get(f"/v1/score/history?subject_id={SUBJECT}")

    assert response.status_code == 200
    data = response.json()
    assert data["subject_id"] == SUBJECT
    assert [s["score_id"] for s in data["scores"]] == [second["score_id"], first["score_id"]]
    assert data["scores"][0]["eligible"] is True
    assert data["scores"][0]["components"]["payment_history"] == 100


def test_loan_quote_endpoint(client: TestClient, steady_earner, to_payload):
    """Test POST /v1/loan/quote against the latest score"""
    scored = client.post(
        "/v1/score", json={"subject_id": SUBJECT, "transactions": to_payload(steady_earner)}
    ).json()

    response = client.post(
        "/v1/loan/quote",
        json={"subject_id": SUBJECT, "amount": 20000, "term_months": 6, "purpose": "Education"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["score_id"] == scored["score_id"]
    assert data["interest_rate"] == scored["loan_eligibility"]["interest_rate"]
    assert len(data["schedule"]) == 6
    assert data["monthly_emi"] > 20000 / 6
    assert data["total_interest"] > 0
    assert sum(inst["principal"] for inst in data["schedule"]) == pytest.approx(20000, abs=0.01)


def test_loan_quote_without_score(client: TestClient):
    response = client.post(
        "/v1/loan/quote",
        json={"subject_id": "ghost@upi", "amount": 20000, "term_months": 6, "purpose": "Education"},
    )
    assert response.status_code == 404


def test_loan_quote_not_eligible(client: TestClient):
    client.post("/v1/score", json={"subject_id": SUBJECT, "transactions": []})

    response = client.post(
        "/v1/loan/quote",
        json={"subject_id": SUBJECT, "amount": 20000, "term_months": 6, "purpose": "Education"},
    )
    assert response.status_code == 422


def test_loan_quote_above_max_amount(client: TestClient, steady_earner, to_payload):
    scored = client.post(
        "/v1/score", json={"subject_id": SUBJECT, "transactions": to_payload(steady_earner)}
    ).json()
    too_much = scored["loan_eligibility"]["max_amount"] + 1000

    response = client.post(
        "/v1/loan/quote",
        json={"subject_id": SUBJECT, "amount": too_much, "term_months": 6, "purpose": "Education"},
    )
    assert response.status_code == 422
