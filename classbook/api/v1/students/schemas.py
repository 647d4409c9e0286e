from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class StudentCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    email: Optional[EmailStr] = None


class StudentResponse(BaseModel):
    id: UUID
    school_id: UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
