from typing import List, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import resolve_school
from classbook.core.models import Teacher

from .schemas import TeacherCreate, TeacherResponse


async def create_teacher(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: TeacherCreate,
) -> TeacherResponse:
    school = await resolve_school(db, school_ref)
    obj = Teacher(
        school_id=school.id,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=str(payload.email).lower() if payload.email else None,
        subject=payload.subject.strip() if payload.subject else None,
        is_active=True,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return TeacherResponse.model_validate(obj)


async def list_teachers(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    active_only: bool = True,
) -> List[TeacherResponse]:
    school = await resolve_school(db, school_ref)
    stmt = select(Teacher).where(Teacher.school_id == school.id)
    if active_only:
        stmt = stmt.where(Teacher.is_active.is_(True))
    result = await db.execute(stmt.order_by(Teacher.last_name, Teacher.first_name))
    return [TeacherResponse.model_validate(t) for t in result.scalars().all()]
