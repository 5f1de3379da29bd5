"""Boundary contract between the analytics engine and whatever supplies its raw rows."""

from typing import Any, Optional, Protocol

from learning_analytics.schemas.analytics import ContentLevel


class ContentScopeNotFoundError(LookupError):
    """The requested course/module/discipline/class does not exist."""

    def __init__(self, level: ContentLevel, content_id: str):
        super().__init__(f"No {level.value} with id {content_id!r}")
        self.level = level
        self.content_id = content_id


class AnalyticsDataSource(Protocol):
    """Supplies raw, non-aggregated rows for one request.

    Each method may return a schema instance, a plain mapping, a
    single-row list (RPC style) or ``None`` when there is nothing to return.
    Row collections must come back in a deterministic order.
    """

    async def fetch_content_analytics_bundle(
        self, level: ContentLevel, content_id: str
    ) -> Optional[Any]:
        ...

    async def fetch_student_contextual_performance(
        self, student_id: str, level: ContentLevel, content_id: str
    ) -> Optional[Any]:
        ...

    async def fetch_student_comprehensive_analytics(self, student_id: str) -> Optional[Any]:
        ...
