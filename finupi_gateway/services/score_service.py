"""Score resolution between the local engine and the remote scoring API"""

import logging
from typing import Any, Optional, Sequence

from finupi_gateway.config import settings
from finupi_gateway.domain.exceptions import ScoringAPIError
from finupi_gateway.domain.models import ScoreResult
from finupi_gateway.domain.remote import map_remote_response
from finupi_gateway.domain.scoring import compute_score
from finupi_gateway.infrastructure.clients.scoring_api import ScoringAPIClient
from finupi_gateway.infrastructure.observability.metrics import scoring_api_failures_counter

SCORE_SOURCES = ("local", "remote", "remote_with_fallback")


class ScoreService:
    """
    Produce one authoritative score per request.

    - local: the in-process engine decides
    - remote: the scoring API decides; its failures propagate
    - remote_with_fallback: the scoring API decides, the local engine
      answers when the API fails

    Results are never blended across sources.
    """

    def __init__(self, client: ScoringAPIClient, source: Optional[str] = None):
        self.client = client
        self.source = source or settings.score_source
        if self.source not in SCORE_SOURCES:
            raise ValueError(f"Unknown score source: {self.source!r}")

    async def score(
        self,
        subject_id: str,
        transactions: Sequence[Any],
        prior_score: Optional[int] = None,
    ) -> ScoreResult:
        """
        Raises:
            InvalidInputError: transactions is not a list
            ScoringAPIError: remote scoring failed and no fallback is configured
        """
        if self.source == "local":
            return compute_score(transactions, subject_id, prior_score)

        try:
            payload = await self.client.get_credit_score(subject_id)
            return map_remote_response(payload, prior_score)
        except ScoringAPIError as e:
            scoring_api_failures_counter.inc()
            if self.source == "remote":
                raise
            logging.warning(
                f"Remote scoring failed, falling back to local engine: {e}",
                extra={"subject_id": subject_id},
            )
            return compute_score(transactions, subject_id, prior_score)
