"""Odds API client for NFL point spreads.

Uses The Odds API: https://the-odds-api.com/liveapi/guides/v4/
Only the spreads market is requested; the matcher needs nothing else.
"""

from __future__ import annotations

import httpx

from ..config import settings
from ..exceptions import TransientFetchError
from ..logging import logger


class OddsAPIClient:
    def __init__(self, client: httpx.Client | None = None) -> None:
        config = settings.odds_config
        if not config.api_key:
            logger.warning("odds_api_key_missing", detail="ODDS_API_KEY not configured; odds sync disabled.")
        self.client = client or httpx.Client(
            base_url=config.base_url,
            headers={"User-Agent": "teaser-pool-sync/1.0"},
            timeout=config.request_timeout_seconds,
        )

    def _truncate_body(self, body: str | None, limit: int = 500) -> str | None:
        if not body:
            return None
        if len(body) <= limit:
            return body
        return f"{body[:limit]}..."

    def fetch_spreads(self) -> list[dict]:
        """Fetch upcoming NFL events with their spreads markets.

        Returns an empty list when no API key is configured.

        Raises:
            TransientFetchError: transport failure, non-200 response or an
                unparseable body.
        """
        config = settings.odds_config
        if not config.api_key:
            return []

        params = {
            "apiKey": config.api_key,
            "regions": ",".join(config.regions),
            "markets": "spreads",
            "oddsFormat": "american",
        }
        try:
            response = self.client.get(f"/sports/{config.sport_key}/odds", params=params)
        except httpx.HTTPError as exc:
            raise TransientFetchError(f"odds fetch failed: {exc}") from exc

        if response.status_code != 200:
            logger.error(
                "odds_api_error",
                status=response.status_code,
                body=self._truncate_body(response.text),
            )
            raise TransientFetchError(
                f"odds feed returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransientFetchError(f"odds feed returned invalid JSON: {exc}") from exc
        logger.info(
            "odds_api_response",
            event_count=len(payload) if isinstance(payload, list) else 0,
            remaining=response.headers.get("x-requests-remaining"),
        )
        return payload if isinstance(payload, list) else []
