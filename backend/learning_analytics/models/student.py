"""Student roster and activity log models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Index
from sqlalchemy.orm import relationship

from learning_analytics.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(120), nullable=False, index=True)
    email = Column(String(120), unique=True, nullable=True)
    class_id = Column(String(36), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc))

    classroom = relationship("Classroom", back_populates="students")
    activity = relationship("StudentActivityLog", back_populates="student")

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.name}', class_id={self.class_id})>"


class StudentActivityLog(Base):
    __tablename__ = "student_activity_log"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(36), ForeignKey("students.id", ondelete="SET NULL"), nullable=True, index=True)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), index=True)

    student = relationship("Student", back_populates="activity")

    __table_args__ = (
        Index("ix_activity_student_time", "student_id", "created_at"),
    )
