"""SQL-backed analytics data source.

Resolves a content scope to its roster, tests, question sets and activity
feed and returns the raw rows. Scope-wide aggregation is left to the
analytics service; the per-student figures returned here still go through
the shared rollup primitives so rounding stays uniform.
"""

from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import date, datetime, timezone
from typing import AsyncIterator, Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy import or_, select, func
from sqlalchemy.ext.asyncio import AsyncSession

from learning_analytics import models
from learning_analytics.config import settings
from learning_analytics.database import AsyncSessionLocal
from learning_analytics.models import (
    Classroom,
    Course,
    CourseModule,
    Discipline,
    Question,
    QuestionSet,
    Student,
    StudentActivityLog,
)
from learning_analytics.repositories.base import ContentScopeNotFoundError
from learning_analytics.schemas import analytics as schemas
from learning_analytics.schemas.analytics import ContentLevel
from learning_analytics.services.breakdown import flashcard_totals
from learning_analytics.services.rollup import average, ratio_percent


def _to_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def count_study_days(timestamps: Iterable[Optional[datetime]]) -> int:
    """Number of distinct UTC calendar days among the timestamps."""
    days: Set[date] = {_to_utc(ts).date() for ts in timestamps if ts is not None}
    return len(days)


def summarize_topic_performance(rows: Sequence) -> List[schemas.PerformanceTopic]:
    """Pooled flashcard accuracy per question set, in first-seen order.

    ``rows`` carry ``question_set_id``, ``subject_name``, ``discipline_name``,
    ``correct_answers`` and ``incorrect_answers``. Sets with no answered
    cards are left out.
    """
    grouped: Dict[str, list] = defaultdict(list)
    labels: Dict[str, tuple] = {}
    for row in rows:
        grouped[row.question_set_id].append(row)
        labels.setdefault(row.question_set_id, (row.subject_name, row.discipline_name))

    topics = []
    for set_id, (subject_name, discipline_name) in labels.items():
        correct, answered = flashcard_totals(grouped[set_id])
        if answered == 0:
            continue
        topics.append(
            schemas.PerformanceTopic(
                question_set_id=set_id,
                subject_name=subject_name,
                discipline_name=discipline_name,
                accuracy=ratio_percent(correct, answered),
            )
        )
    return topics


def pick_strengths(
    topics: Sequence[schemas.PerformanceTopic],
    threshold: int,
    limit: int,
) -> List[schemas.PerformanceTopic]:
    strong = [t for t in topics if t.accuracy >= threshold]
    return sorted(strong, key=lambda t: t.accuracy, reverse=True)[:limit]


def pick_weaknesses(
    topics: Sequence[schemas.PerformanceTopic],
    threshold: int,
    limit: int,
) -> List[schemas.PerformanceTopic]:
    weak = [t for t in topics if t.accuracy < threshold]
    return sorted(weak, key=lambda t: t.accuracy)[:limit]


class SqlAnalyticsDataSource:
    """``AnalyticsDataSource`` over the console's relational store.

    Bound to a single ``AsyncSession``; do not share one instance between
    concurrently running calls.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------
    # Scope resolution
    # ------------------------------------------------------------------

    async def _course_id_for_scope(self, level: ContentLevel, content_id: str) -> str:
        if level == ContentLevel.COURSE:
            stmt = select(Course.id).where(Course.id == content_id)
        elif level == ContentLevel.CLASS:
            stmt = select(Classroom.course_id).where(Classroom.id == content_id)
        elif level == ContentLevel.MODULE:
            stmt = select(CourseModule.course_id).where(CourseModule.id == content_id)
        else:
            stmt = (
                select(CourseModule.course_id)
                .join(Discipline, Discipline.module_id == CourseModule.id)
                .where(Discipline.id == content_id)
            )
        result = await self.db.execute(stmt)
        course_id = result.scalar_one_or_none()
        if course_id is None:
            raise ContentScopeNotFoundError(level, content_id)
        return course_id

    async def _student_exists(self, student_id: str) -> bool:
        result = await self.db.execute(select(Student.id).where(Student.id == student_id))
        return result.scalar_one_or_none() is not None

    async def _roster(self, course_id: str) -> List[schemas.StudentRef]:
        result = await self.db.execute(
            select(Student.id, Student.name)
            .join(Classroom, Student.class_id == Classroom.id)
            .where(Classroom.course_id == course_id)
            .order_by(Student.name, Student.id)
        )
        return [schemas.StudentRef.model_validate(row) for row in result.all()]

    async def _question_sets(self, level: ContentLevel, content_id: str, course_id: str) -> List:
        stmt = select(QuestionSet.id, QuestionSet.subject_name).join(
            Discipline, QuestionSet.discipline_id == Discipline.id
        )
        if level == ContentLevel.DISCIPLINE:
            stmt = stmt.where(Discipline.id == content_id)
        elif level == ContentLevel.MODULE:
            stmt = stmt.where(Discipline.module_id == content_id)
        else:
            # classes see the whole course's content
            stmt = stmt.join(CourseModule, Discipline.module_id == CourseModule.id).where(
                CourseModule.course_id == course_id
            )
        result = await self.db.execute(stmt.order_by(QuestionSet.subject_name, QuestionSet.id))
        return list(result.all())

    async def _tests(self, level: ContentLevel, content_id: str, course_id: str) -> List[schemas.TestRef]:
        if level == ContentLevel.DISCIPLINE:
            condition = models.Test.discipline_id == content_id
        elif level == ContentLevel.MODULE:
            condition = models.Test.module_id == content_id
        else:
            condition = models.Test.course_id == course_id
        result = await self.db.execute(
            select(models.Test.id, models.Test.name)
            .where(condition)
            .order_by(models.Test.name, models.Test.id)
        )
        return [schemas.TestRef.model_validate(row) for row in result.all()]

    # ------------------------------------------------------------------
    # Raw rows
    # ------------------------------------------------------------------

    async def _attempts(self, student_ids: List[str], test_ids: List[str]) -> List[schemas.TestAttempt]:
        if not student_ids or not test_ids:
            return []
        result = await self.db.execute(
            select(
                models.TestAttempt.id,
                models.TestAttempt.student_id,
                models.TestAttempt.test_id,
                models.TestAttempt.score,
                models.TestAttempt.created_at,
                models.Test.name.label("test_name"),
            )
            .join(models.Test, models.TestAttempt.test_id == models.Test.id)
            .where(
                models.TestAttempt.student_id.in_(student_ids),
                models.TestAttempt.test_id.in_(test_ids),
            )
            .order_by(models.TestAttempt.created_at, models.TestAttempt.id)
        )
        return [schemas.TestAttempt.model_validate(row) for row in result.all()]

    async def _sessions(self, student_ids: List[str], set_ids: List[str]) -> List[schemas.FlashcardSession]:
        if not student_ids or not set_ids:
            return []
        result = await self.db.execute(
            select(
                models.FlashcardSession.id,
                models.FlashcardSession.student_id,
                models.FlashcardSession.question_set_id,
                models.FlashcardSession.correct_answers,
                models.FlashcardSession.incorrect_answers,
                models.FlashcardSession.status,
                models.FlashcardSession.created_at,
                models.FlashcardSession.completed_at,
                Student.name.label("student_name"),
            )
            .join(Student, models.FlashcardSession.student_id == Student.id)
            .where(
                models.FlashcardSession.student_id.in_(student_ids),
                models.FlashcardSession.question_set_id.in_(set_ids),
            )
            .order_by(models.FlashcardSession.created_at, models.FlashcardSession.id)
        )
        return [schemas.FlashcardSession.model_validate(row) for row in result.all()]

    async def _activity_log(
        self,
        student_ids: List[str],
        subject_names: List[str],
        limit: int,
    ) -> List[schemas.ActivityLogEntry]:
        stmt = (
            select(
                StudentActivityLog.id,
                StudentActivityLog.student_id,
                StudentActivityLog.description,
                StudentActivityLog.created_at,
                Student.name.label("student_name"),
            )
            .outerjoin(Student, StudentActivityLog.student_id == Student.id)
            .where(StudentActivityLog.student_id.in_(student_ids))
        )
        if subject_names:
            stmt = stmt.where(
                or_(*[StudentActivityLog.description.icontains(name, autoescape=True) for name in subject_names])
            )
        result = await self.db.execute(
            stmt.order_by(StudentActivityLog.created_at.desc().nulls_last(), StudentActivityLog.id.desc()).limit(limit)
        )
        return [schemas.ActivityLogEntry.model_validate(row) for row in result.all()]

    # ------------------------------------------------------------------
    # AnalyticsDataSource
    # ------------------------------------------------------------------

    async def fetch_content_analytics_bundle(
        self, level: ContentLevel, content_id: str
    ) -> schemas.ContentAnalyticsBundle:
        course_id = await self._course_id_for_scope(level, content_id)
        students = await self._roster(course_id)
        if not students:
            return schemas.ContentAnalyticsBundle()

        student_ids = [s.id for s in students]
        question_sets = await self._question_sets(level, content_id, course_id)
        tests = await self._tests(level, content_id, course_id)
        attempts = await self._attempts(student_ids, [t.id for t in tests])
        sessions = await self._sessions(student_ids, [qs.id for qs in question_sets])

        if level in (ContentLevel.MODULE, ContentLevel.DISCIPLINE) and not question_sets:
            activity_log = []
        else:
            activity_log = await self._activity_log(
                student_ids,
                [qs.subject_name for qs in question_sets],
                settings.ACTIVITY_LOG_LIMIT,
            )

        return schemas.ContentAnalyticsBundle(
            students=students,
            tests=tests,
            test_attempts=attempts,
            sessions=sessions,
            activity_log=activity_log,
        )

    async def fetch_student_contextual_performance(
        self, student_id: str, level: ContentLevel, content_id: str
    ) -> Optional[schemas.StudentContextualPerformance]:
        if not await self._student_exists(student_id):
            return None

        course_id = await self._course_id_for_scope(level, content_id)
        question_sets = await self._question_sets(level, content_id, course_id)
        tests = await self._tests(level, content_id, course_id)
        attempts = await self._attempts([student_id], [t.id for t in tests])
        sessions = await self._sessions([student_id], [qs.id for qs in question_sets])

        correct, answered = flashcard_totals(sessions)
        return schemas.StudentContextualPerformance(
            student_test_average=average(a.score for a in attempts),
            student_flashcard_accuracy=ratio_percent(correct, answered),
            test_attempts=attempts,
            flashcard_sessions=sessions,
        )

    async def fetch_student_comprehensive_analytics(
        self, student_id: str
    ) -> Optional[schemas.StudentComprehensiveAnalytics]:
        if not await self._student_exists(student_id):
            return None

        attempt_rows = (
            await self.db.execute(
                select(models.TestAttempt.score, models.TestAttempt.created_at)
                .where(models.TestAttempt.student_id == student_id)
            )
        ).all()

        session_rows = (
            await self.db.execute(
                select(
                    models.FlashcardSession.question_set_id,
                    models.FlashcardSession.correct_answers,
                    models.FlashcardSession.incorrect_answers,
                    models.FlashcardSession.created_at,
                    QuestionSet.subject_name,
                    Discipline.name.label("discipline_name"),
                )
                .join(QuestionSet, models.FlashcardSession.question_set_id == QuestionSet.id)
                .join(Discipline, QuestionSet.discipline_id == Discipline.id)
                .where(models.FlashcardSession.student_id == student_id)
                .order_by(models.FlashcardSession.created_at, models.FlashcardSession.id)
            )
        ).all()

        question_counts: Dict[str, int] = {}
        set_ids = list({row.question_set_id for row in session_rows})
        if set_ids:
            count_rows = (
                await self.db.execute(
                    select(Question.question_set_id, func.count(Question.id).label("question_count"))
                    .where(Question.question_set_id.in_(set_ids))
                    .group_by(Question.question_set_id)
                )
            ).all()
            question_counts = {row.question_set_id: row.question_count for row in count_rows}

        activity_times = (
            await self.db.execute(
                select(StudentActivityLog.created_at).where(StudentActivityLog.student_id == student_id)
            )
        ).scalars().all()

        recent_activity = (
            await self.db.execute(
                select(
                    StudentActivityLog.id,
                    StudentActivityLog.student_id,
                    StudentActivityLog.description,
                    StudentActivityLog.created_at,
                )
                .where(StudentActivityLog.student_id == student_id)
                .order_by(StudentActivityLog.created_at.desc().nulls_last(), StudentActivityLog.id.desc())
                .limit(settings.RECENT_ACTIVITY_LIMIT)
            )
        ).all()

        correct, answered = flashcard_totals(session_rows)
        total_questions = sum(question_counts.get(row.question_set_id, 0) for row in session_rows)

        topics = summarize_topic_performance(session_rows)
        return schemas.StudentComprehensiveAnalytics(
            overall_progress=ratio_percent(answered, total_questions),
            test_average=average(row.score for row in attempt_rows),
            flashcard_accuracy=ratio_percent(correct, answered),
            study_days=count_study_days(
                [row.created_at for row in attempt_rows]
                + [row.created_at for row in session_rows]
                + list(activity_times)
            ),
            total_sessions=len(session_rows),
            strengths=pick_strengths(topics, settings.STRENGTH_THRESHOLD, settings.PERFORMANCE_TOPIC_LIMIT),
            weaknesses=pick_weaknesses(topics, settings.WEAKNESS_THRESHOLD, settings.PERFORMANCE_TOPIC_LIMIT),
            recent_activity=[schemas.ActivityLogEntry.model_validate(row) for row in recent_activity],
        )


@asynccontextmanager
async def sql_data_source() -> AsyncIterator[SqlAnalyticsDataSource]:
    """Open a session from the configured factory and expose it as a data source."""
    async with AsyncSessionLocal() as session:
        yield SqlAnalyticsDataSource(session)
