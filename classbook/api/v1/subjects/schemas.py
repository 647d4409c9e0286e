from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from classbook.core.enums import SchoolType


class SubjectCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    code: Optional[str] = Field(None, max_length=20)
    school_type: Optional[SchoolType] = None
    class_level_id: Optional[UUID] = None


class SubjectResponse(BaseModel):
    id: UUID
    school_id: UUID
    name: str
    code: Optional[str] = None
    school_type: Optional[SchoolType] = None
    class_level_id: Optional[UUID] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
