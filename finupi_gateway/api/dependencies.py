"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from finupi_gateway.infrastructure.clients.scoring_api import ScoringAPIClient
from finupi_gateway.services.score_service import ScoreService


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_scoring_api_client() -> ScoringAPIClient:
    """Provide remote scoring API client instance"""
    return ScoringAPIClient()


def get_score_service() -> ScoreService:
    """Provide score resolution service configured from settings"""
    return ScoreService(get_scoring_api_client())
