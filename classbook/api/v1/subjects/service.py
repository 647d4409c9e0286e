from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import resolve_school
from classbook.core.enums import SchoolType
from classbook.core.exceptions import ConflictError, NotFoundError
from classbook.core.models import ClassLevel, Subject

from .schemas import SubjectCreate, SubjectResponse


async def create_subject(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: SubjectCreate,
) -> SubjectResponse:
    school = await resolve_school(db, school_ref)
    name = payload.name.strip()
    school_type = payload.school_type.value if payload.school_type else None

    if payload.class_level_id is not None:
        level = await db.get(ClassLevel, payload.class_level_id)
        if not level or level.school_id != school.id:
            raise NotFoundError("Class level not found")

    stmt = select(Subject.id).where(Subject.school_id == school.id, Subject.name == name)
    if school_type is None:
        stmt = stmt.where(Subject.school_type.is_(None))
    else:
        stmt = stmt.where(Subject.school_type == school_type)
    existing = await db.execute(stmt)
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f'Subject "{name}" already exists')

    try:
        obj = Subject(
            school_id=school.id,
            name=name,
            code=payload.code or None,
            school_type=school_type,
            class_level_id=payload.class_level_id,
            is_active=True,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f'Subject "{name}" already exists')
    return SubjectResponse.model_validate(obj)


async def list_subjects(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    school_type: Optional[SchoolType] = None,
) -> List[SubjectResponse]:
    """Active subjects. A type filter also returns subjects not tied to any type."""
    school = await resolve_school(db, school_ref)
    stmt = select(Subject).where(Subject.school_id == school.id, Subject.is_active.is_(True))
    if school_type is not None:
        stmt = stmt.where(or_(Subject.school_type == school_type.value, Subject.school_type.is_(None)))
    result = await db.execute(stmt.order_by(Subject.name))
    return [SubjectResponse.model_validate(s) for s in result.scalars().all()]
