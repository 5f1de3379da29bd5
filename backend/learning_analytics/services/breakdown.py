"""Per-student and per-test breakdowns built from flat attempt and session rows."""

from collections import defaultdict
from typing import Dict, Iterable, List, Sequence, Tuple

from learning_analytics.schemas.analytics import (
    FlashcardSession,
    StudentBreakdown,
    StudentRef,
    TestAttempt,
    TestBreakdown,
    TestRef,
)
from learning_analytics.services.rollup import average, ratio_percent


def _scores_by_student(attempts: Iterable[TestAttempt]) -> Dict[str, List[int]]:
    grouped: Dict[str, List[int]] = defaultdict(list)
    for attempt in attempts:
        grouped[attempt.student_id].append(attempt.score)
    return grouped


def _scores_by_test(attempts: Iterable[TestAttempt]) -> Dict[str, List[int]]:
    grouped: Dict[str, List[int]] = defaultdict(list)
    for attempt in attempts:
        grouped[attempt.test_id].append(attempt.score)
    return grouped


def flashcard_totals(sessions: Iterable) -> Tuple[int, int]:
    """Return ``(correct, answered)`` summed over the sessions.

    Accepts ``FlashcardSession`` models or raw rows with ``correct_answers``
    and ``incorrect_answers``; NULL counts add nothing.
    """
    correct = 0
    answered = 0
    for session in sessions:
        right = session.correct_answers or 0
        wrong = session.incorrect_answers or 0
        correct += right
        answered += right + wrong
    return correct, answered


def _flashcard_totals_by_student(sessions: Iterable[FlashcardSession]) -> Dict[str, Tuple[int, int]]:
    grouped: Dict[str, List[FlashcardSession]] = defaultdict(list)
    for session in sessions:
        grouped[session.student_id].append(session)
    return {student_id: flashcard_totals(rows) for student_id, rows in grouped.items()}


def build_student_breakdowns(
    students: Sequence[StudentRef],
    attempts: Sequence[TestAttempt],
    sessions: Sequence[FlashcardSession],
) -> List[StudentBreakdown]:
    """One breakdown per roster member, in roster order.

    Members without attempts or sessions get ``0`` for the missing figure.
    Rows belonging to students outside the roster are ignored.
    """
    scores = _scores_by_student(attempts)
    flashcards = _flashcard_totals_by_student(sessions)

    breakdowns = []
    for student in students:
        correct, answered = flashcards.get(student.id, (0, 0))
        breakdowns.append(
            StudentBreakdown(
                id=student.id,
                name=student.name,
                test_average=average(scores.get(student.id, [])),
                flashcard_accuracy=ratio_percent(correct, answered),
            )
        )
    return breakdowns


def build_test_breakdowns(
    tests: Sequence[TestRef],
    attempts: Sequence[TestAttempt],
) -> List[TestBreakdown]:
    """One breakdown per test passed in; tests nobody attempted average ``0``."""
    scores = _scores_by_test(attempts)
    return [
        TestBreakdown(id=test.id, name=test.name, average=average(scores.get(test.id, [])))
        for test in tests
    ]
