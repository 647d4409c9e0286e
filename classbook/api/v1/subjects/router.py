from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.enums import SchoolType
from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import SubjectCreate, SubjectResponse
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/subjects", tags=["subjects"])


@router.post("", response_model=SubjectResponse, status_code=status.HTTP_201_CREATED)
async def create_subject(
    school_id: str,
    payload: SubjectCreate,
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    try:
        return await service.create_subject(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[SubjectResponse])
async def list_subjects(
    school_id: str,
    school_type: Optional[SchoolType] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[SubjectResponse]:
    try:
        return await service.list_subjects(db, school_id, school_type=school_type)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
