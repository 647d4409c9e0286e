"""Student membership of a class or class arm for an academic year.
Never hard-deleted: closed with is_active=false and end_date."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from classbook.db.session import Base


class Enrollment(Base):
    __tablename__ = "enrollments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    # SET NULL keeps closed enrollments once their class is removed
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="SET NULL"), nullable=True)
    class_arm_id = Column(UUID(as_uuid=True), ForeignKey("class_arms.id", ondelete="SET NULL"), nullable=True)
    class_level = Column(String(50), nullable=True)
    academic_year = Column(String(9), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    enrollment_date = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=True)

    student = relationship("Student")
