"""Academic structure models: course → module → discipline → question set, plus classrooms."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from learning_analytics.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class Course(Base):
    __tablename__ = "courses"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    modules = relationship("CourseModule", back_populates="course", cascade="all, delete-orphan")
    classes = relationship("Classroom", back_populates="course", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Course(id={self.id}, name='{self.name}')>"


class CourseModule(Base):
    __tablename__ = "modules"

    id = Column(String(36), primary_key=True, default=_uuid)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    course = relationship("Course", back_populates="modules")
    disciplines = relationship("Discipline", back_populates="module", cascade="all, delete-orphan")


class Discipline(Base):
    __tablename__ = "disciplines"

    id = Column(String(36), primary_key=True, default=_uuid)
    module_id = Column(String(36), ForeignKey("modules.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    module = relationship("CourseModule", back_populates="disciplines")
    question_sets = relationship("QuestionSet", back_populates="discipline", cascade="all, delete-orphan")


class QuestionSet(Base):
    __tablename__ = "question_sets"

    id = Column(String(36), primary_key=True, default=_uuid)
    discipline_id = Column(String(36), ForeignKey("disciplines.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_name = Column(String(200), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    discipline = relationship("Discipline", back_populates="question_sets")
    questions = relationship("Question", back_populates="question_set", cascade="all, delete-orphan")


class Question(Base):
    __tablename__ = "questions"

    id = Column(String(36), primary_key=True, default=_uuid)
    question_set_id = Column(String(36), ForeignKey("question_sets.id", ondelete="CASCADE"), nullable=False, index=True)
    question_text = Column(Text, nullable=False)

    question_set = relationship("QuestionSet", back_populates="questions")


class Classroom(Base):
    __tablename__ = "classes"

    id = Column(String(36), primary_key=True, default=_uuid)
    course_id = Column(String(36), ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(120), nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    course = relationship("Course", back_populates="classes")
    students = relationship("Student", back_populates="classroom")

    __table_args__ = (
        Index("ix_classes_course_name", "course_id", "name"),
    )

    def __repr__(self):
        return f"<Classroom(id={self.id}, name='{self.name}', course_id={self.course_id})>"
