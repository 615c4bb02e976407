"""ESPN NFL scoreboard client.

One request per (season type, week) returns every event of that week with
competitors, scores, status and kickoff time.
"""

from __future__ import annotations

from typing import Any

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..config import settings
from ..exceptions import TransientFetchError
from ..logging import logger


class ESPNScheduleClient:
    def __init__(self, client: httpx.Client | None = None) -> None:
        config = settings.schedule_config
        self.client = client or httpx.Client(
            base_url=config.base_url,
            headers={"User-Agent": "teaser-pool-sync/1.0", "Accept": "application/json"},
            timeout=config.request_timeout_seconds,
        )

    @retry(
        wait=wait_fixed(2),
        stop=stop_after_attempt(settings.schedule_config.max_attempts),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    def _get(self, params: dict[str, Any]) -> httpx.Response:
        return self.client.get("/scoreboard", params=params)

    def fetch_week_events(self, season_type: int, week: int) -> list[dict]:
        """Fetch raw scoreboard events for one season type and feed week index.

        Raises:
            TransientFetchError: transport failure, non-200, or a non-JSON body.
        """
        params = {"seasontype": season_type, "week": week}
        try:
            response = self._get(params)
        except httpx.HTTPError as exc:
            raise TransientFetchError(f"schedule fetch failed ({season_type}/{week}): {exc}") from exc

        if response.status_code != 200:
            logger.error(
                "espn_scoreboard_error",
                season_type=season_type,
                week=week,
                status=response.status_code,
            )
            raise TransientFetchError(
                f"schedule feed returned {response.status_code} for {season_type}/{week}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransientFetchError(f"schedule feed returned invalid JSON: {exc}") from exc

        events = payload.get("events") if isinstance(payload, dict) else None
        if not isinstance(events, list):
            logger.info("espn_scoreboard_no_events", season_type=season_type, week=week)
            return []

        logger.info(
            "espn_scoreboard_response",
            season_type=season_type,
            week=week,
            event_count=len(events),
        )
        return events
