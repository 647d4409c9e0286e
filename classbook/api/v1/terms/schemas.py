from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from classbook.api.v1.classes.schemas import ACADEMIC_YEAR_PATTERN


class TermCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50, description='e.g. "First Term"')
    academic_year: str = Field(..., pattern=ACADEMIC_YEAR_PATTERN)


class TermResponse(BaseModel):
    id: UUID
    school_id: UUID
    name: str
    academic_year: str
    created_at: datetime

    class Config:
        from_attributes = True
