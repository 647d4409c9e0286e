"""
Resolve the class a request points at.

A class id may name either a ClassArm (PRIMARY/SECONDARY, owned through its
ClassLevel) or a legacy SchoolClass (TERTIARY courses, older records owned
directly by the school). Each operation resolves once and passes the resulting
target down; nothing below this module branches on raw ids again.
"""

from dataclasses import dataclass
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from classbook.core.enums import SchoolType, TargetKind
from classbook.core.exceptions import NotFoundError
from classbook.core.models import ClassArm, School, SchoolClass


@dataclass(frozen=True)
class ClassArmTarget:
    id: UUID
    school_id: UUID
    display_name: str
    type: SchoolType
    academic_year: str
    class_level_name: str
    class_level_id: UUID
    kind: TargetKind = TargetKind.CLASS_ARM

    def match(self, model):
        """Filter clause selecting rows of `model` linked to this arm."""
        return model.class_arm_id == self.id

    def link(self) -> dict:
        return {"class_arm_id": self.id, "class_id": None}


@dataclass(frozen=True)
class LegacyClassTarget:
    id: UUID
    school_id: UUID
    display_name: str
    type: SchoolType
    academic_year: str
    class_level_name: Optional[str]
    kind: TargetKind = TargetKind.CLASS

    def match(self, model):
        return model.class_id == self.id

    def link(self) -> dict:
        return {"class_id": self.id, "class_arm_id": None}


ClassTarget = Union[ClassArmTarget, LegacyClassTarget]


def _as_uuid(value: Union[str, UUID]) -> Optional[UUID]:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


async def resolve_school(db: AsyncSession, school_ref: Union[str, UUID]) -> School:
    """Find a school by database id or subdomain."""
    school_uuid = _as_uuid(school_ref)
    school = await db.get(School, school_uuid) if school_uuid else None
    if school is None:
        result = await db.execute(select(School).where(School.subdomain == str(school_ref).lower()))
        school = result.scalar_one_or_none()
    if school is None:
        raise NotFoundError("School not found")
    return school


async def resolve_class_target(
    db: AsyncSession,
    school: School,
    class_ref: Union[str, UUID],
) -> ClassTarget:
    class_uuid = _as_uuid(class_ref)
    if class_uuid is None:
        raise NotFoundError("Class or ClassArm not found")

    arm_result = await db.execute(
        select(ClassArm).options(joinedload(ClassArm.class_level)).where(ClassArm.id == class_uuid)
    )
    arm = arm_result.scalar_one_or_none()
    # Ownership check guards against arms belonging to another school
    if arm is not None and arm.class_level.school_id == school.id:
        return target_from_arm(arm, school.id)

    cls_result = await db.execute(
        select(SchoolClass).where(SchoolClass.id == class_uuid, SchoolClass.school_id == school.id)
    )
    cls = cls_result.scalar_one_or_none()
    if cls is None:
        raise NotFoundError("Class or ClassArm not found")
    return target_from_class(cls)


async def lock_target(db: AsyncSession, target: ClassTarget) -> None:
    """Row-lock the class or arm for the rest of the transaction (no-op on SQLite)."""
    model = ClassArm if target.kind == TargetKind.CLASS_ARM else SchoolClass
    await db.execute(select(model.id).where(model.id == target.id).with_for_update())


def target_from_arm(arm: ClassArm, school_id: UUID) -> ClassArmTarget:
    """Build a target from an arm whose class_level is already loaded."""
    return ClassArmTarget(
        id=arm.id,
        school_id=school_id,
        display_name=arm.display_name,
        type=SchoolType(arm.class_level.type),
        academic_year=arm.academic_year,
        class_level_name=arm.class_level.name,
        class_level_id=arm.class_level_id,
    )


def target_from_class(cls: SchoolClass) -> LegacyClassTarget:
    return LegacyClassTarget(
        id=cls.id,
        school_id=cls.school_id,
        display_name=cls.name,
        type=SchoolType(cls.type),
        academic_year=cls.academic_year,
        class_level_name=cls.class_level,
    )
