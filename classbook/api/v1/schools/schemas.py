from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class SchoolCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    subdomain: str = Field(..., min_length=1, max_length=63, pattern=r"^[a-zA-Z0-9-]+$")
    has_primary: bool = False
    has_secondary: bool = False
    has_tertiary: bool = False


class SchoolResponse(BaseModel):
    id: UUID
    name: str
    subdomain: str
    has_primary: bool
    has_secondary: bool
    has_tertiary: bool
    created_at: datetime

    class Config:
        from_attributes = True
