"""Remote scoring API HTTP client"""

from typing import Any, Dict

import httpx

from finupi_gateway.config import settings
from finupi_gateway.domain.exceptions import ScoringAPIError


class ScoringAPIClient:
    """Client for the external credit scoring service"""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.scoring_api_base
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def get_credit_score(self, subject_id: str) -> Dict[str, Any]:
        """
        Fetch the remote credit score payload for a subject.

        Raises:
            ScoringAPIError: On timeout, network or HTTP errors, or a non-object body
        """
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}/get_credit_score",
                    json={"user_id": subject_id},
                )
                response.raise_for_status()
                data = response.json()

            except httpx.TimeoutException as e:
                raise ScoringAPIError(f"Scoring API timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                raise ScoringAPIError(f"Scoring API error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise ScoringAPIError(f"Scoring API unreachable: {e}") from e
            except ValueError as e:
                raise ScoringAPIError(f"Invalid JSON from scoring API: {e}") from e

        if not isinstance(data, dict):
            raise ScoringAPIError("Scoring API response is not a JSON object")
        return data
