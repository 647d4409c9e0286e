from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from classbook.api.v1.classes.schemas import ACADEMIC_YEAR_PATTERN
from classbook.core.enums import SchoolType


class ClassLevelCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description='e.g. "JSS 1", "Primary 3", "100 Level"')
    type: SchoolType
    level: int = Field(0, ge=0, description="Sort order within the school type")


class ClassArmInfo(BaseModel):
    id: UUID
    name: str
    academic_year: str
    is_active: bool

    class Config:
        from_attributes = True


class ClassLevelResponse(BaseModel):
    id: UUID
    school_id: UUID
    name: str
    type: SchoolType
    level: int
    created_at: datetime
    arms: List[ClassArmInfo] = []


class ClassArmCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description='e.g. "A", "Gold"')
    academic_year: Optional[str] = Field(
        None, pattern=ACADEMIC_YEAR_PATTERN, description="Defaults to the current academic year"
    )
