"""Usage analytics endpoints."""

import asyncio

from docquery.api.client import ApiClient
from docquery.core.exceptions import InputValidationError
from docquery.schemas.analytics_schema import AnalyticsOverview, TimelineEntry, UsageStats

PERIODS = (7, 30, 90)


def validate_period(days: int) -> int:
    if days not in PERIODS:
        raise InputValidationError(
            f"Period must be one of {', '.join(str(p) for p in PERIODS)} days",
            field="days",
        )
    return days


class AnalyticsService:
    """Client for per-user usage statistics."""

    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def stats(self, days: int = 30) -> UsageStats:
        response = await self._client.get(
            "/analytics/stats", params={"days": validate_period(days)}
        )
        return UsageStats.model_validate(response.json())

    async def timeline(self, days: int = 30) -> list[TimelineEntry]:
        response = await self._client.get(
            "/analytics/timeline", params={"days": validate_period(days)}
        )
        return [TimelineEntry.model_validate(item) for item in response.json()]

    async def overview(self, days: int = 30) -> AnalyticsOverview:
        """Fetch stats and timeline concurrently."""
        stats, timeline = await asyncio.gather(self.stats(days), self.timeline(days))
        return AnalyticsOverview(stats=stats, timeline=timeline)
