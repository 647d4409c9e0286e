"""Teacher linked to exactly one of a legacy class or a class arm.
is_primary marks the form (homeroom) teacher; subject marks a subject teacher."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from classbook.db.session import Base


class ClassTeacher(Base):
    __tablename__ = "class_teachers"
    __table_args__ = (
        CheckConstraint(
            "(class_id IS NULL) <> (class_arm_id IS NULL)",
            name="ck_class_teacher_single_target",
        ),
        UniqueConstraint(
            "teacher_id", "class_id", "class_arm_id", "subject",
            name="uq_class_teacher_assignment",
            postgresql_nulls_not_distinct=True,
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="CASCADE"), nullable=False)
    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), nullable=True)
    class_arm_id = Column(UUID(as_uuid=True), ForeignKey("class_arms.id", ondelete="CASCADE"), nullable=True)
    subject = Column(String(100), nullable=True)
    is_primary = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher", foreign_keys=[teacher_id])
    school_class = relationship("SchoolClass", foreign_keys=[class_id])
    class_arm = relationship("ClassArm", foreign_keys=[class_arm_id])
