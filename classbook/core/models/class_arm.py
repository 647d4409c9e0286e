"""Named subdivision of a ClassLevel (e.g. JSS 1 Gold). Used by PRIMARY/SECONDARY schools."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from classbook.db.session import Base


class ClassArm(Base):
    __tablename__ = "class_arms"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_level_id = Column(UUID(as_uuid=True), ForeignKey("class_levels.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(50), nullable=False)
    academic_year = Column(String(9), nullable=False)  # e.g. 2024/2025
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    class_level = relationship("ClassLevel", backref="arms")

    @property
    def display_name(self) -> str:
        return f"{self.class_level.name} {self.name}"
