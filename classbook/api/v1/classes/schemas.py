from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from classbook.core.enums import SchoolType, TargetKind

ACADEMIC_YEAR_PATTERN = r"^\d{4}/\d{4}$"


class ClassCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255, description='e.g. "JSS1", "Introduction to Computer Science"')
    code: Optional[str] = Field(None, max_length=20, description="Course code for tertiary courses (e.g. CS101)")
    class_level: Optional[str] = Field(None, max_length=50)
    type: SchoolType
    academic_year: str = Field(..., pattern=ACADEMIC_YEAR_PATTERN, description="e.g. 2024/2025")
    credit_hours: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None


class ClassUpdate(BaseModel):
    """Partial update. For class arms only `name` is applied."""

    name: Optional[str] = Field(None, max_length=255)
    code: Optional[str] = Field(None, max_length=20)
    class_level: Optional[str] = Field(None, max_length=50)
    type: Optional[SchoolType] = None
    academic_year: Optional[str] = Field(None, pattern=ACADEMIC_YEAR_PATTERN)
    credit_hours: Optional[int] = Field(None, ge=0)
    description: Optional[str] = None


class ClassTeacherInfo(BaseModel):
    id: UUID
    teacher_id: UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    subject: Optional[str] = None
    is_primary: bool
    created_at: datetime


class ClassResponse(BaseModel):
    id: UUID
    kind: TargetKind
    name: str
    code: Optional[str] = None
    class_level: Optional[str] = None
    type: SchoolType
    academic_year: str
    credit_hours: Optional[int] = None
    description: Optional[str] = None
    is_active: bool
    created_at: datetime
    teachers: List[ClassTeacherInfo] = []
    students_count: int = 0
    class_arm_id: Optional[UUID] = None
    class_level_id: Optional[UUID] = None


class EnrollmentCreate(BaseModel):
    student_id: UUID


class EnrollmentInfo(BaseModel):
    id: UUID
    class_level: Optional[str] = None
    academic_year: str
    enrollment_date: datetime


class ClassStudentResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: Optional[str] = None
    enrollment: EnrollmentInfo


class ClassDeleteResponse(BaseModel):
    message: str
    closed_enrollments: int = 0
