from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes import service as class_service
from classbook.api.v1.classes.schemas import ClassResponse
from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import TeacherCreate, TeacherResponse
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/teachers", tags=["teachers"])


@router.post("", response_model=TeacherResponse, status_code=status.HTTP_201_CREATED)
async def create_teacher(
    school_id: str,
    payload: TeacherCreate,
    db: AsyncSession = Depends(get_db),
) -> TeacherResponse:
    try:
        return await service.create_teacher(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[TeacherResponse])
async def list_teachers(
    school_id: str,
    active_only: bool = Query(True, description="Return only is_active=true by default"),
    db: AsyncSession = Depends(get_db),
) -> List[TeacherResponse]:
    try:
        return await service.list_teachers(db, school_id, active_only=active_only)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{teacher_id}/classes", response_model=List[ClassResponse])
async def get_teacher_classes(
    school_id: str,
    teacher_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[ClassResponse]:
    """Classes the teacher is assigned to or timetabled in."""
    try:
        return await class_service.get_teacher_classes(db, school_id, teacher_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
