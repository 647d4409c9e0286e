from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class AssignTeacherRequest(BaseModel):
    teacher_id: UUID = Field(..., description="Teacher in the same school")
    subject: Optional[str] = Field(
        None,
        max_length=100,
        description="Required for SECONDARY subject teachers; free text elsewhere",
    )
    is_primary: bool = Field(False, description="Form (homeroom) teacher")
