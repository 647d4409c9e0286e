from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from classbook.core.enums import WorkloadBand


class RankedTeacherResponse(BaseModel):
    teacher_id: UUID
    first_name: str
    last_name: str
    period_count: int
    band: WorkloadBand
    recommended: bool
    warning: Optional[str] = None

    class Config:
        from_attributes = True


class LeastLoadedTeacherResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    period_count: int


class PeriodCount(BaseModel):
    name: str
    count: int


class TeacherWorkload(BaseModel):
    teacher_id: UUID
    first_name: str
    last_name: str
    total_periods: int
    class_count: int
    subject_count: int
    periods_by_subject: Dict[str, PeriodCount]
    periods_by_class: Dict[str, PeriodCount]
    band: WorkloadBand


class WorkloadWarning(BaseModel):
    teacher_id: UUID
    teacher_name: str
    period_count: int
    band: WorkloadBand
    message: str


class UnassignedSubject(BaseModel):
    subject_id: UUID
    subject_name: str
    message: str


class WorkloadSummaryResponse(BaseModel):
    teachers: List[TeacherWorkload]
    average_periods: float
    warnings: List[WorkloadWarning]
    unassigned_subjects: List[UnassignedSubject]
