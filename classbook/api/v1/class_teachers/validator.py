"""School-type rules for putting a teacher on a class or class arm."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from classbook.api.v1.classes.resolver import ClassTarget
from classbook.core.enums import SchoolType
from classbook.core.exceptions import BadRequestError, ConflictError
from classbook.core.models import ClassArm, ClassLevel, ClassTeacher, SchoolClass


async def _other_primary_assignment(db: AsyncSession, target: ClassTarget, teacher_id: UUID) -> Optional[str]:
    """Name of another PRIMARY class or arm this teacher already sits on, if any."""
    arm_result = await db.execute(
        select(ClassArm)
        .join(ClassTeacher, ClassTeacher.class_arm_id == ClassArm.id)
        .join(ClassLevel, ClassArm.class_level_id == ClassLevel.id)
        .options(joinedload(ClassArm.class_level))
        .where(
            ClassTeacher.teacher_id == teacher_id,
            ClassLevel.type == SchoolType.PRIMARY.value,
            ClassArm.id != target.id,
        )
        .limit(1)
    )
    arm = arm_result.scalars().first()
    if arm is not None:
        return arm.display_name

    cls_result = await db.execute(
        select(SchoolClass.name)
        .join(ClassTeacher, ClassTeacher.class_id == SchoolClass.id)
        .where(
            ClassTeacher.teacher_id == teacher_id,
            SchoolClass.type == SchoolType.PRIMARY.value,
            SchoolClass.id != target.id,
        )
        .limit(1)
    )
    return cls_result.scalars().first()


async def validate_teacher_assignment(
    db: AsyncSession,
    target: ClassTarget,
    teacher_id: UUID,
    subject: Optional[str],
    is_primary: bool,
) -> None:
    """
    PRIMARY: a teacher holds at most one class, and a class has exactly one teacher
    unless the new one replaces it as form teacher.
    SECONDARY: one form teacher per class; subject teachers need a subject and
    each subject has one teacher per class.
    TERTIARY: anything goes.
    """
    if target.type == SchoolType.PRIMARY:
        other = await _other_primary_assignment(db, target, teacher_id)
        if other:
            raise ConflictError(
                f"This teacher is already assigned to {other}. "
                "Please remove them from that class before assigning to this class."
            )
        existing = await db.execute(select(ClassTeacher.id).where(target.match(ClassTeacher)).limit(1))
        if existing.scalar_one_or_none() is not None and not is_primary:
            raise BadRequestError(
                "Primary schools can only have one teacher per class. "
                "Set is_primary to true to replace the current teacher."
            )
        return

    if target.type == SchoolType.SECONDARY:
        if is_primary:
            result = await db.execute(
                select(ClassTeacher.teacher_id).where(
                    target.match(ClassTeacher),
                    ClassTeacher.is_primary.is_(True),
                )
            )
            if any(tid != teacher_id for tid in result.scalars().all()):
                raise ConflictError("Another teacher is already assigned as the form teacher for this class")
            return

        if not subject:
            raise BadRequestError("Subject is required for subject teacher assignments in secondary schools")
        result = await db.execute(
            select(ClassTeacher.teacher_id).where(
                target.match(ClassTeacher),
                ClassTeacher.subject == subject,
            )
        )
        if any(tid != teacher_id for tid in result.scalars().all()):
            raise ConflictError(f"Another teacher is already assigned to teach {subject} in this class")
