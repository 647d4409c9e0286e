from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.enums import SchoolType
from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import LeastLoadedTeacherResponse, RankedTeacherResponse, WorkloadSummaryResponse
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}", tags=["workloads"])


@router.get("/workloads", response_model=WorkloadSummaryResponse)
async def get_workload_summary(
    school_id: str,
    term_id: UUID = Query(...),
    school_type: Optional[SchoolType] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> WorkloadSummaryResponse:
    try:
        return await service.get_workload_summary(db, school_id, term_id, school_type=school_type)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/subjects/{subject_id}/teacher-candidates", response_model=List[RankedTeacherResponse])
async def get_subject_teacher_candidates(
    school_id: str,
    subject_id: UUID,
    term_id: UUID = Query(...),
    db: AsyncSession = Depends(get_db),
) -> List[RankedTeacherResponse]:
    """Competent teachers, least loaded first. The first one is flagged recommended."""
    try:
        return await service.get_subject_teacher_candidates(db, school_id, subject_id, term_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/subjects/{subject_id}/least-loaded-teacher",
    response_model=Optional[LeastLoadedTeacherResponse],
)
async def get_least_loaded_teacher(
    school_id: str,
    subject_id: UUID,
    term_id: UUID = Query(...),
    exclude_teacher_ids: List[UUID] = Query([]),
    db: AsyncSession = Depends(get_db),
) -> Optional[LeastLoadedTeacherResponse]:
    try:
        return await service.get_least_loaded_teacher(
            db, school_id, subject_id, term_id, exclude_teacher_ids=exclude_teacher_ids
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
