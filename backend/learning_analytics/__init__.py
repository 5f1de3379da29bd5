"""Learning analytics aggregation engine for the education management console."""

from learning_analytics.services.analytics_service import (
    assemble_content_analytics,
    get_content_analytics,
    get_student_comprehensive_analytics,
    get_student_performance_in_context,
)

__all__ = [
    "assemble_content_analytics",
    "get_content_analytics",
    "get_student_comprehensive_analytics",
    "get_student_performance_in_context",
]
