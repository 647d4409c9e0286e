from datetime import time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from classbook.core.enums import DayOfWeek, PeriodType


class TimetablePeriodIn(BaseModel):
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    type: PeriodType = PeriodType.LESSON
    subject_id: Optional[UUID] = None
    course_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None

    @model_validator(mode="after")
    def non_lesson_rows_are_bare(self) -> "TimetablePeriodIn":
        if self.type != PeriodType.LESSON and (self.subject_id or self.course_id or self.teacher_id):
            raise ValueError(f"{self.type.value} periods cannot have a subject, course or teacher")
        return self


class TimetableSaveRequest(BaseModel):
    term_id: UUID
    class_id: str = Field(..., description="Class arm or class id")
    periods: List[TimetablePeriodIn] = []


class AutoGenerateRequest(BaseModel):
    term_id: UUID
    class_id: str
    seed: Optional[int] = Field(None, description="Fix the random choices, e.g. to reproduce a preview")


class InsertRowRequest(BaseModel):
    term_id: UUID
    class_id: str
    type: PeriodType
    start_time: time
    end_time: time


class TimetablePeriodResponse(BaseModel):
    id: Optional[UUID] = None  # None for unsaved (generated) periods
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    type: PeriodType
    subject_id: Optional[UUID] = None
    subject_name: Optional[str] = None
    course_id: Optional[UUID] = None
    course_name: Optional[str] = None
    teacher_id: Optional[UUID] = None
    teacher_name: Optional[str] = None
