"""Pytest configuration and shared fixtures."""

from typing import Any, List, Optional, Tuple

import pytest


class FakeDataSource:
    """In-memory ``AnalyticsDataSource`` returning canned payloads.

    A payload that is an ``Exception`` instance is raised instead of returned.
    Every call is recorded in ``calls``.
    """

    def __init__(
        self,
        bundle: Any = None,
        contextual: Any = None,
        comprehensive: Any = None,
    ):
        self.bundle = bundle
        self.contextual = contextual
        self.comprehensive = comprehensive
        self.calls: List[Tuple[str, tuple]] = []

    @staticmethod
    def _answer(payload: Any) -> Optional[Any]:
        if isinstance(payload, Exception):
            raise payload
        return payload

    async def fetch_content_analytics_bundle(self, level, content_id):
        self.calls.append(("bundle", (level, content_id)))
        return self._answer(self.bundle)

    async def fetch_student_contextual_performance(self, student_id, level, content_id):
        self.calls.append(("contextual", (student_id, level, content_id)))
        return self._answer(self.contextual)

    async def fetch_student_comprehensive_analytics(self, student_id):
        self.calls.append(("comprehensive", (student_id,)))
        return self._answer(self.comprehensive)


@pytest.fixture
def fake_source_factory():
    """Build a ``FakeDataSource`` with the given payloads."""
    return FakeDataSource


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "unit: mark test as a unit test")
