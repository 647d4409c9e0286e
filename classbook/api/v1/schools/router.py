from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import SchoolCreate, SchoolResponse
from . import service

router = APIRouter(prefix="/api/v1/schools", tags=["schools"])


@router.post("", response_model=SchoolResponse, status_code=status.HTTP_201_CREATED)
async def create_school(
    payload: SchoolCreate,
    db: AsyncSession = Depends(get_db),
) -> SchoolResponse:
    try:
        return await service.create_school(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{school_id}", response_model=SchoolResponse)
async def get_school(
    school_id: str,
    db: AsyncSession = Depends(get_db),
) -> SchoolResponse:
    """Look up by id or subdomain."""
    try:
        return await service.get_school(db, school_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
