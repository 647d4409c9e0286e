from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import AutoGenerateRequest, InsertRowRequest, TimetablePeriodResponse, TimetableSaveRequest
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/timetables", tags=["timetables"])


@router.get("", response_model=List[TimetablePeriodResponse])
async def list_timetable(
    school_id: str,
    term_id: UUID = Query(...),
    class_id: str = Query(..., description="Class arm or class id"),
    db: AsyncSession = Depends(get_db),
) -> List[TimetablePeriodResponse]:
    try:
        return await service.list_timetable(db, school_id, term_id, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("", response_model=List[TimetablePeriodResponse])
async def bulk_save_timetable(
    school_id: str,
    payload: TimetableSaveRequest,
    db: AsyncSession = Depends(get_db),
) -> List[TimetablePeriodResponse]:
    """Replace every period of the class for the term."""
    try:
        return await service.bulk_save_timetable(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/auto-generate", response_model=List[TimetablePeriodResponse])
async def auto_generate_timetable(
    school_id: str,
    payload: AutoGenerateRequest,
    db: AsyncSession = Depends(get_db),
) -> List[TimetablePeriodResponse]:
    """Preview only. Review the grid, then save it with PUT."""
    try:
        return await service.preview_auto_generated_timetable(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/rows", response_model=List[TimetablePeriodResponse], status_code=status.HTTP_201_CREATED)
async def insert_timetable_row(
    school_id: str,
    payload: InsertRowRequest,
    db: AsyncSession = Depends(get_db),
) -> List[TimetablePeriodResponse]:
    try:
        return await service.insert_timetable_row(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
