"""Tests, test attempts and flashcard study sessions."""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from learning_analytics.database import Base


class FlashcardSessionStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class Test(Base):
    __tablename__ = "tests"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    module_id = Column(String(36), ForeignKey("modules.id", ondelete="SET NULL"), nullable=True, index=True)
    discipline_id = Column(String(36), ForeignKey("disciplines.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    attempts = relationship("TestAttempt", back_populates="test", cascade="all, delete-orphan")


class TestAttempt(Base):
    __tablename__ = "test_attempts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    test_id = Column(String(36), ForeignKey("tests.id", ondelete="CASCADE"), nullable=False, index=True)
    score = Column(Integer, nullable=False)  # 0-100
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    test = relationship("Test", back_populates="attempts")
    student = relationship("Student")

    __table_args__ = (
        Index("ix_attempts_student_test", "student_id", "test_id"),
    )


class FlashcardSession(Base):
    __tablename__ = "flashcard_sessions"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    question_set_id = Column(String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    correct_answers = Column(Integer, nullable=False, default=0)
    incorrect_answers = Column(Integer, nullable=False, default=0)
    status = Column(String(20), nullable=False, default=FlashcardSessionStatus.IN_PROGRESS.value)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))
    completed_at = Column(DateTime(timezone=True), nullable=True)

    student = relationship("Student")
    question_set = relationship("QuestionSet")

    __table_args__ = (
        Index("ix_flashcard_sessions_student_set", "student_id", "question_set_id"),
    )
