"""Class levels and their arms. Arms exist only under PRIMARY and SECONDARY levels."""

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from classbook.api.v1.classes.resolver import resolve_school, target_from_arm
from classbook.api.v1.classes.schemas import ClassResponse
from classbook.api.v1.classes.service import (
    build_class_view,
    current_academic_year,
    validate_school_type_for_class,
)
from classbook.core.enums import SchoolType
from classbook.core.exceptions import BadRequestError, ConflictError, NotFoundError
from classbook.core.models import ClassArm, ClassLevel

from .schemas import ClassArmCreate, ClassArmInfo, ClassLevelCreate, ClassLevelResponse

logger = logging.getLogger(__name__)


def _to_response(level: ClassLevel, arms: List[ClassArm]) -> ClassLevelResponse:
    return ClassLevelResponse(
        id=level.id,
        school_id=level.school_id,
        name=level.name,
        type=SchoolType(level.type),
        level=level.level,
        created_at=level.created_at,
        arms=[ClassArmInfo.model_validate(a) for a in sorted(arms, key=lambda a: a.name)],
    )


async def create_class_level(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: ClassLevelCreate,
) -> ClassLevelResponse:
    school = await resolve_school(db, school_ref)
    validate_school_type_for_class(school, payload.type)
    name = payload.name.strip()

    existing = await db.execute(
        select(ClassLevel.id).where(
            ClassLevel.school_id == school.id,
            ClassLevel.type == payload.type.value,
            ClassLevel.name == name,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f'Class level "{name}" already exists')
    try:
        obj = ClassLevel(school_id=school.id, name=name, type=payload.type.value, level=payload.level)
        db.add(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f'Class level "{name}" already exists')
    return _to_response(obj, [])


async def list_class_levels(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    type_filter: Optional[SchoolType] = None,
) -> List[ClassLevelResponse]:
    school = await resolve_school(db, school_ref)
    stmt = (
        select(ClassLevel)
        .options(selectinload(ClassLevel.arms))
        .where(ClassLevel.school_id == school.id)
        .order_by(ClassLevel.type, ClassLevel.level, ClassLevel.name)
    )
    if type_filter is not None:
        stmt = stmt.where(ClassLevel.type == type_filter.value)
    result = await db.execute(stmt)
    return [_to_response(level, level.arms) for level in result.scalars().all()]


async def create_class_arm(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    level_id: UUID,
    payload: ClassArmCreate,
) -> ClassResponse:
    school = await resolve_school(db, school_ref)
    level = await db.get(ClassLevel, level_id)
    if not level or level.school_id != school.id:
        raise NotFoundError("Class level not found")
    if level.type not in (SchoolType.PRIMARY.value, SchoolType.SECONDARY.value):
        raise BadRequestError("Class arms can only be created for primary or secondary class levels")

    name = payload.name.strip()
    academic_year = payload.academic_year or current_academic_year()
    existing = await db.execute(
        select(ClassArm.id).where(
            ClassArm.class_level_id == level.id,
            ClassArm.name == name,
            ClassArm.academic_year == academic_year,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f'Class arm "{level.name} {name}" already exists for {academic_year}')

    arm = ClassArm(class_level=level, name=name, academic_year=academic_year, is_active=True)
    db.add(arm)
    await db.commit()
    logger.info("Created class arm %s %s (%s)", level.name, name, arm.id)
    return await build_class_view(db, target_from_arm(arm, school.id))
