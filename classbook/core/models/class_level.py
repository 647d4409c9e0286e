"""Grade tier (JSS 1, Primary 3, 100 Level) scoped to a school and a school type."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from classbook.db.session import Base


class ClassLevel(Base):
    __tablename__ = "class_levels"
    __table_args__ = (
        UniqueConstraint("school_id", "type", "name", name="uq_class_level_school_type_name"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    school_id = Column(UUID(as_uuid=True), ForeignKey("schools.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)
    type = Column(String(20), nullable=False)  # PRIMARY | SECONDARY | TERTIARY
    level = Column(Integer, nullable=False, default=0)  # sort order
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    school = relationship("School")
