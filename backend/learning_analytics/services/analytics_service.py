"""Analytics service: rolls raw scope rows up into dashboard payloads."""

import logging
from typing import Any, Optional, Union

from learning_analytics.repositories.base import AnalyticsDataSource
from learning_analytics.schemas.analytics import (
    ContentAnalytics,
    ContentAnalyticsBundle,
    ContentLevel,
    StudentComprehensiveAnalytics,
    StudentContextualPerformance,
)
from learning_analytics.services.breakdown import (
    build_student_breakdowns,
    build_test_breakdowns,
    flashcard_totals,
)
from learning_analytics.services.fallback import safe_fallback
from learning_analytics.services.rollup import average, ratio_percent

logger = logging.getLogger(__name__)


def _first_row(payload: Any) -> Any:
    # RPC-style sources return a one-row list
    if isinstance(payload, list):
        return payload[0] if payload else None
    return payload


def assemble_content_analytics(bundle: ContentAnalyticsBundle) -> ContentAnalytics:
    """Aggregate one scope's raw rows. Pure and synchronous.

    Scope-wide averages are pooled over every raw row (not averaged per
    student first). Rankings are descending and stable, so ties keep the
    order the rows arrived in.
    """
    correct, answered = flashcard_totals(bundle.sessions)

    students = build_student_breakdowns(bundle.students, bundle.test_attempts, bundle.sessions)
    tests = build_test_breakdowns(bundle.tests, bundle.test_attempts)

    return ContentAnalytics(
        student_count=len(bundle.students),
        test_count=len(bundle.tests),
        average_score=average(a.score for a in bundle.test_attempts),
        flashcard_session_count=len(bundle.sessions),
        average_flashcard_accuracy=ratio_percent(correct, answered),
        students=sorted(students, key=lambda s: s.test_average + s.flashcard_accuracy, reverse=True),
        tests=sorted(tests, key=lambda t: t.average, reverse=True),
        flashcard_sessions=list(bundle.sessions),
        activity_log=list(bundle.activity_log),
    )


@safe_fallback(ContentAnalytics, "Content analytics")
async def get_content_analytics(
    source: AnalyticsDataSource,
    level: Union[ContentLevel, str],
    content_id: str,
) -> ContentAnalytics:
    """Scope-wide analytics; the zero-valued shape on any failure or missing data."""
    level = ContentLevel(level)
    raw = await source.fetch_content_analytics_bundle(level, content_id)
    if not raw:
        logger.info(f"No analytics data for {level.value} {content_id}")
        return ContentAnalytics()

    bundle = ContentAnalyticsBundle.model_validate(raw)
    return assemble_content_analytics(bundle)


@safe_fallback(lambda: None, "Student contextual performance")
async def get_student_performance_in_context(
    source: AnalyticsDataSource,
    student_id: str,
    level: Union[ContentLevel, str],
    content_id: str,
) -> Optional[StudentContextualPerformance]:
    """One student's performance inside a content scope, or ``None`` if it could not be loaded."""
    level = ContentLevel(level)
    raw = _first_row(
        await source.fetch_student_contextual_performance(student_id, level, content_id)
    )
    if raw is None:
        logger.info(f"No contextual performance for student {student_id} in {level.value} {content_id}")
        return None

    return StudentContextualPerformance.model_validate(raw)


@safe_fallback(lambda: None, "Student comprehensive analytics")
async def get_student_comprehensive_analytics(
    source: AnalyticsDataSource,
    student_id: str,
) -> Optional[StudentComprehensiveAnalytics]:
    """Platform-wide analytics for one student, or ``None`` if it could not be loaded.

    ``strengths``, ``weaknesses`` and ``recent_activity`` are always lists.
    """
    raw = _first_row(await source.fetch_student_comprehensive_analytics(student_id))
    if not raw:
        logger.info(f"No comprehensive analytics for student {student_id}")
        return None

    return StudentComprehensiveAnalytics.model_validate(raw)
