from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.schemas import ClassResponse
from classbook.core.enums import SchoolType
from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import ClassArmCreate, ClassLevelCreate, ClassLevelResponse
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/class-levels", tags=["class-levels"])


@router.post("", response_model=ClassLevelResponse, status_code=status.HTTP_201_CREATED)
async def create_class_level(
    school_id: str,
    payload: ClassLevelCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassLevelResponse:
    try:
        return await service.create_class_level(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ClassLevelResponse])
async def list_class_levels(
    school_id: str,
    type: Optional[SchoolType] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[ClassLevelResponse]:
    try:
        return await service.list_class_levels(db, school_id, type_filter=type)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post("/{level_id}/arms", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class_arm(
    school_id: str,
    level_id: UUID,
    payload: ClassArmCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.create_class_arm(db, school_id, level_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
