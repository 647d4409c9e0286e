"""Timetable grid cell: one (day, start, end) slot for a class or class arm in a term.
LESSON rows may carry subject/course and teacher; BREAK/LUNCH/ASSEMBLY rows never do."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String, Time
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from classbook.db.session import Base


class TimetablePeriod(Base):
    __tablename__ = "timetable_periods"
    __table_args__ = (
        CheckConstraint(
            "(class_id IS NULL) <> (class_arm_id IS NULL)",
            name="ck_timetable_period_single_target",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    term_id = Column(UUID(as_uuid=True), ForeignKey("terms.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True)
    class_arm_id = Column(UUID(as_uuid=True), ForeignKey("class_arms.id", ondelete="CASCADE"), nullable=True)
    day_of_week = Column(String(10), nullable=False)  # MONDAY .. SUNDAY
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    type = Column(String(10), nullable=False, default="LESSON")
    subject_id = Column(UUID(as_uuid=True), ForeignKey("subjects.id", ondelete="SET NULL"), nullable=True)
    # TERTIARY lessons point at a course (a TERTIARY class)
    course_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    subject = relationship("Subject")
    course = relationship("SchoolClass", foreign_keys=[course_id])
    teacher = relationship("Teacher")
