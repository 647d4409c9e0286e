from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import TermCreate, TermResponse
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/terms", tags=["terms"])


@router.post("", response_model=TermResponse, status_code=status.HTTP_201_CREATED)
async def create_term(
    school_id: str,
    payload: TermCreate,
    db: AsyncSession = Depends(get_db),
) -> TermResponse:
    try:
        return await service.create_term(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[TermResponse])
async def list_terms(
    school_id: str,
    academic_year: Optional[str] = Query(None, description="e.g. 2024/2025"),
    db: AsyncSession = Depends(get_db),
) -> List[TermResponse]:
    try:
        return await service.list_terms(db, school_id, academic_year=academic_year)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
