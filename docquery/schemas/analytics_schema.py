"""Usage analytics schemas."""

import datetime

from pydantic import BaseModel, ConfigDict


class DocumentStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    total_size_bytes: int = 0
    avg_word_count: float = 0


class QueryStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    avg_response_time_ms: float = 0
    avg_confidence: float = 0


class ChatStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    sessions: int = 0
    messages: int = 0


class UsageStats(BaseModel):
    """Aggregate usage over the last `period_days` days."""

    model_config = ConfigDict(frozen=True)

    period_days: int
    documents: DocumentStats
    queries: QueryStats
    chat: ChatStats


class TimelineEntry(BaseModel):
    """Query count for a single day."""

    model_config = ConfigDict(frozen=True)

    date: datetime.date
    queries: int


class AnalyticsOverview(BaseModel):
    """Stats and daily timeline for the same period."""

    model_config = ConfigDict(frozen=True)

    stats: UsageStats
    timeline: list[TimelineEntry]

    @property
    def peak_day(self) -> TimelineEntry | None:
        return max(self.timeline, key=lambda entry: entry.queries, default=None)
