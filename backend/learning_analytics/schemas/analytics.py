"""Analytics schemas: raw row shapes read from the data store and the rolled-up dashboard payloads.

Raw rows keep the store's snake_case column names. Dashboard payloads are
serialised with camelCase aliases (``model_dump(by_alias=True)``) and accept
either spelling on input.
"""

import enum
from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def _none_to_list(value: Any) -> Any:
    return [] if value is None else value


def _none_to_zero(value: Any) -> Any:
    return 0 if value is None else value


class ContentLevel(str, enum.Enum):
    """Node kinds of the course → module → discipline → class hierarchy."""
    COURSE = "course"
    MODULE = "module"
    DISCIPLINE = "discipline"
    CLASS = "class"


class RowModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class DashboardModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---------------------------------------------------------------------------
# Raw rows
# ---------------------------------------------------------------------------


class StudentRef(RowModel):
    id: str
    name: str


class TestRef(RowModel):
    id: str
    name: str


class TestAttempt(RowModel):
    student_id: str
    test_id: str
    score: int
    id: Optional[str] = None
    test_name: Optional[str] = None
    created_at: Optional[datetime] = None


class FlashcardSession(RowModel):
    student_id: str
    correct_answers: int = 0
    incorrect_answers: int = 0
    status: Optional[str] = None
    created_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    id: Optional[str] = None
    question_set_id: Optional[str] = None
    student_name: Optional[str] = None

    @field_validator("correct_answers", "incorrect_answers", mode="before")
    @classmethod
    def zero_when_missing(cls, value):
        return _none_to_zero(value)


class ActivityLogEntry(RowModel):
    id: str
    description: str
    created_at: Optional[datetime] = None
    student_id: Optional[str] = None
    student_name: Optional[str] = None


class ContentAnalyticsBundle(DashboardModel):
    """Every row relevant to one content scope, not pre-aggregated."""

    students: List[StudentRef] = Field(default_factory=list)
    tests: List[TestRef] = Field(default_factory=list)
    test_attempts: List[TestAttempt] = Field(default_factory=list)
    sessions: List[FlashcardSession] = Field(default_factory=list)
    activity_log: List[ActivityLogEntry] = Field(default_factory=list)

    @field_validator(
        "students", "tests", "test_attempts", "sessions", "activity_log", mode="before"
    )
    @classmethod
    def empty_when_missing(cls, value):
        return _none_to_list(value)


# ---------------------------------------------------------------------------
# Rolled-up payloads
# ---------------------------------------------------------------------------


class StudentBreakdown(DashboardModel):
    id: str
    name: str
    test_average: int = 0
    flashcard_accuracy: int = 0


class TestBreakdown(DashboardModel):
    id: str
    name: str
    average: int = 0


class ContentAnalytics(DashboardModel):
    """Scope-wide analytics. The default instance is the zero-valued "no data" shape."""

    student_count: int = 0
    test_count: int = 0
    average_score: int = 0
    flashcard_session_count: int = 0
    average_flashcard_accuracy: int = 0
    students: List[StudentBreakdown] = Field(default_factory=list)
    tests: List[TestBreakdown] = Field(default_factory=list)
    flashcard_sessions: List[FlashcardSession] = Field(default_factory=list)
    activity_log: List[ActivityLogEntry] = Field(default_factory=list)


class StudentContextualPerformance(DashboardModel):
    student_test_average: Union[int, float] = 0
    student_flashcard_accuracy: Union[int, float] = 0
    test_attempts: List[TestAttempt] = Field(default_factory=list)
    flashcard_sessions: List[FlashcardSession] = Field(default_factory=list)

    @field_validator("test_attempts", "flashcard_sessions", mode="before")
    @classmethod
    def empty_when_missing(cls, value):
        return _none_to_list(value)


class PerformanceTopic(DashboardModel):
    question_set_id: str
    subject_name: str
    discipline_name: Optional[str] = None
    accuracy: int = 0


class StudentComprehensiveAnalytics(DashboardModel):
    overall_progress: Union[int, float] = 0
    test_average: Union[int, float] = 0
    flashcard_accuracy: Union[int, float] = 0
    study_days: int = 0
    total_sessions: int = 0
    strengths: List[PerformanceTopic] = Field(default_factory=list)
    weaknesses: List[PerformanceTopic] = Field(default_factory=list)
    recent_activity: List[ActivityLogEntry] = Field(default_factory=list)

    @field_validator("strengths", "weaknesses", "recent_activity", mode="before")
    @classmethod
    def empty_when_missing(cls, value):
        return _none_to_list(value)
