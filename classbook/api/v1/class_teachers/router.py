"""Class teacher assignment API. Assignment e-mails go out after the response is sent."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.schemas import ClassResponse
from classbook.core.exceptions import ServiceError
from classbook.db.session import get_db
from classbook.services.notifications import NotificationQueue, get_notification_queue

from .schemas import AssignTeacherRequest
from . import service

router = APIRouter(prefix="/api/v1/schools/{school_id}/classes", tags=["class-teachers"])


@router.post(
    "/{class_id}/teachers",
    response_model=ClassResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_teacher_to_class(
    school_id: str,
    class_id: str,
    payload: AssignTeacherRequest,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    queue: NotificationQueue = Depends(get_notification_queue),
) -> ClassResponse:
    try:
        return await service.assign_teacher_to_class(
            db,
            school_id,
            class_id,
            payload,
            notify=lambda n: queue.dispatch(background_tasks, n),
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete("/{class_id}/teachers/{teacher_id}", response_model=ClassResponse)
async def remove_teacher_from_class(
    school_id: str,
    class_id: str,
    teacher_id: UUID,
    background_tasks: BackgroundTasks,
    subject: Optional[str] = Query(None, description="Remove only the row for this subject"),
    db: AsyncSession = Depends(get_db),
    queue: NotificationQueue = Depends(get_notification_queue),
) -> ClassResponse:
    try:
        return await service.remove_teacher_from_class(
            db,
            school_id,
            class_id,
            teacher_id,
            subject=subject,
            notify=lambda n: queue.dispatch(background_tasks, n),
        )
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
