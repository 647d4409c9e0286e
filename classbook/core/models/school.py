"""School (tenant). Capability flags decide which class types it may hold."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.dialects.postgresql import UUID

from classbook.db.session import Base


class School(Base):
    __tablename__ = "schools"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    # Public identifier, used interchangeably with id in URLs
    subdomain = Column(String(63), unique=True, nullable=False, index=True)
    has_primary = Column(Boolean, nullable=False, default=False)
    has_secondary = Column(Boolean, nullable=False, default=False)
    has_tertiary = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
