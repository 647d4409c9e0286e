from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class TeacherCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    subject: Optional[str] = Field(
        None,
        max_length=255,
        description='Subjects the teacher can teach, comma separated (e.g. "Mathematics, Physics")',
    )


class TeacherResponse(BaseModel):
    id: UUID
    school_id: UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    subject: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
