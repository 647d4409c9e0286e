from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.enums import SchoolType
from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db

from .schemas import ClassCreate, ClassDeleteResponse, ClassResponse, ClassStudentResponse, ClassUpdate, EnrollmentCreate
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/classes", tags=["classes"])


@router.post("", response_model=ClassResponse, status_code=status.HTTP_201_CREATED)
async def create_class(
    school_id: str,
    payload: ClassCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.create_class(db, school_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[ClassResponse])
async def list_classes(
    school_id: str,
    academic_year: Optional[str] = Query(None, description="Defaults to the current academic year"),
    type: Optional[SchoolType] = Query(None, description="TERTIARY lists courses; otherwise class arms"),
    db: AsyncSession = Depends(get_db),
) -> List[ClassResponse]:
    try:
        return await service.list_classes(db, school_id, academic_year=academic_year, type_filter=type)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{class_id}", response_model=ClassResponse)
async def get_class(
    school_id: str,
    class_id: str,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.get_class(db, school_id, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.patch("/{class_id}", response_model=ClassResponse)
async def update_class(
    school_id: str,
    class_id: str,
    payload: ClassUpdate,
    db: AsyncSession = Depends(get_db),
) -> ClassResponse:
    try:
        return await service.update_class(db, school_id, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}", response_model=ClassDeleteResponse)
async def delete_class(
    school_id: str,
    class_id: str,
    force: bool = Query(False, description="Close active enrollments and delete anyway"),
    db: AsyncSession = Depends(get_db),
) -> ClassDeleteResponse:
    try:
        return await service.delete_class(db, school_id, class_id, force=force)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/{class_id}/students", response_model=List[ClassStudentResponse])
async def list_class_students(
    school_id: str,
    class_id: str,
    db: AsyncSession = Depends(get_db),
) -> List[ClassStudentResponse]:
    try:
        return await service.list_class_students(db, school_id, class_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/{class_id}/students",
    response_model=ClassStudentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_student(
    school_id: str,
    class_id: str,
    payload: EnrollmentCreate,
    db: AsyncSession = Depends(get_db),
) -> ClassStudentResponse:
    try:
        return await service.enroll_student(db, school_id, class_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
