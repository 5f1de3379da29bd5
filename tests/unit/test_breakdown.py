"""Unit tests for per-student and per-test breakdowns."""

from types import SimpleNamespace

from learning_analytics.schemas.analytics import (
    FlashcardSession,
    StudentRef,
    TestAttempt as AttemptRow,
    TestRef as TestRow,
)
from learning_analytics.services.breakdown import (
    build_student_breakdowns,
    build_test_breakdowns,
    flashcard_totals,
)


def _attempt(student_id, test_id, score):
    return AttemptRow(student_id=student_id, test_id=test_id, score=score)


def _session(student_id, correct, incorrect):
    return FlashcardSession(
        student_id=student_id,
        correct_answers=correct,
        incorrect_answers=incorrect,
        status="completed",
    )


ROSTER = [StudentRef(id="s1", name="Ana"), StudentRef(id="s2", name="Bruno")]


class TestStudentBreakdowns:
    def test_averages_per_student(self):
        attempts = [_attempt("s1", "t1", 80), _attempt("s1", "t1", 90), _attempt("s2", "t1", 50)]

        result = build_student_breakdowns(ROSTER, attempts, [])

        assert [(b.id, b.test_average, b.flashcard_accuracy) for b in result] == [
            ("s1", 85, 0),
            ("s2", 50, 0),
        ]

    def test_flashcard_accuracy_per_student(self):
        sessions = [_session("s1", 8, 2), _session("s2", 3, 7)]

        result = build_student_breakdowns(ROSTER, [], sessions)

        assert {b.id: b.flashcard_accuracy for b in result} == {"s1": 80, "s2": 30}

    def test_accuracy_pools_multiple_sessions(self):
        sessions = [_session("s1", 1, 0), _session("s1", 0, 3)]

        result = build_student_breakdowns(ROSTER[:1], [], sessions)

        assert result[0].flashcard_accuracy == 25

    def test_member_without_data_gets_zeros(self):
        result = build_student_breakdowns(ROSTER, [_attempt("s1", "t1", 70)], [])

        assert result[1].id == "s2"
        assert result[1].test_average == 0
        assert result[1].flashcard_accuracy == 0

    def test_length_matches_roster(self):
        attempts = [_attempt("ghost", "t1", 100), _attempt("s2", "t1", 40), _attempt("s2", "t2", 60)]
        sessions = [_session("ghost", 5, 5)]

        result = build_student_breakdowns(ROSTER, attempts, sessions)

        assert [b.id for b in result] == ["s1", "s2"]

    def test_empty_roster(self):
        assert build_student_breakdowns([], [_attempt("s1", "t1", 90)], []) == []

    def test_sessions_without_answers(self):
        result = build_student_breakdowns(ROSTER[:1], [], [_session("s1", 0, 0)])

        assert result[0].flashcard_accuracy == 0


class TestTestBreakdowns:
    def test_average_per_test(self):
        tests = [TestRow(id="t1", name="Anatomy"), TestRow(id="t2", name="Biology")]
        attempts = [_attempt("s1", "t1", 80), _attempt("s2", "t1", 90), _attempt("s1", "t2", 50)]

        result = build_test_breakdowns(tests, attempts)

        assert [(t.id, t.name, t.average) for t in result] == [
            ("t1", "Anatomy", 85),
            ("t2", "Biology", 50),
        ]

    def test_unattempted_test_is_zero(self):
        result = build_test_breakdowns([TestRow(id="t9", name="Chemistry")], [_attempt("s1", "t1", 80)])

        assert len(result) == 1
        assert result[0].average == 0


def test_flashcard_totals():
    assert flashcard_totals([_session("s1", 8, 2), _session("s2", 3, 7)]) == (11, 20)
    assert flashcard_totals([]) == (0, 0)


def test_flashcard_totals_reads_raw_rows_with_null_counts():
    rows = [
        SimpleNamespace(correct_answers=4, incorrect_answers=None),
        SimpleNamespace(correct_answers=None, incorrect_answers=6),
    ]

    assert flashcard_totals(rows) == (4, 10)
