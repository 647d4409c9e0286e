"""Assign and remove class teachers.

Validation, the duplicate guard and the insert run in one transaction that
starts by row-locking the class or arm, so concurrent requests for the same
class are checked one after another. The unique constraint on class_teachers
catches anything that still slips through.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import ClassTarget, lock_target, resolve_class_target, resolve_school
from classbook.api.v1.classes.schemas import ClassResponse
from classbook.api.v1.classes.service import build_class_view
from classbook.core.enums import NotificationKind, SchoolType
from classbook.core.exceptions import ConflictError, NotFoundError
from classbook.core.models import ClassTeacher, School, Teacher
from classbook.services.notifications import Notifier, TeacherNotification

from .schemas import AssignTeacherRequest
from .validator import validate_teacher_assignment

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Teacher is already assigned to this class/arm with this subject"


def _notification(
    kind: NotificationKind,
    school: School,
    target: ClassTarget,
    teacher: Teacher,
    subject: Optional[str],
    is_primary: bool = False,
) -> TeacherNotification:
    return TeacherNotification(
        kind=kind,
        email=teacher.email,
        teacher_name=teacher.full_name,
        class_name=target.display_name,
        class_level=target.class_level_name,
        subject=subject,
        school_name=school.name,
        is_primary=is_primary,
        academic_year=target.academic_year,
    )


def _clean_subject(subject: Optional[str]) -> Optional[str]:
    """Blank subjects mean no subject."""
    if subject is None or not subject.strip():
        return None
    return subject.strip()


def _subject_clause(subject: Optional[str]):
    if subject is None:
        return ClassTeacher.subject.is_(None)
    return ClassTeacher.subject == subject


async def _get_school_teacher(db: AsyncSession, school: School, teacher_id: UUID) -> Teacher:
    teacher = await db.get(Teacher, teacher_id)
    if not teacher or teacher.school_id != school.id:
        raise NotFoundError("Teacher not found in this school")
    return teacher


async def assign_teacher_to_class(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
    payload: AssignTeacherRequest,
    notify: Optional[Notifier] = None,
) -> ClassResponse:
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)
    teacher = await _get_school_teacher(db, school, payload.teacher_id)
    subject = _clean_subject(payload.subject)

    await lock_target(db, target)
    await validate_teacher_assignment(db, target, teacher.id, subject, payload.is_primary)

    existing = await db.execute(
        select(ClassTeacher.id).where(
            target.match(ClassTeacher),
            ClassTeacher.teacher_id == teacher.id,
            _subject_clause(subject),
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(DUPLICATE_MESSAGE)

    if target.type == SchoolType.PRIMARY and payload.is_primary:
        # Single form teacher per primary class
        await db.execute(
            update(ClassTeacher)
            .where(target.match(ClassTeacher), ClassTeacher.is_primary.is_(True))
            .values(is_primary=False)
        )

    try:
        db.add(
            ClassTeacher(
                teacher_id=teacher.id,
                subject=subject,
                is_primary=payload.is_primary,
                **target.link(),
            )
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(DUPLICATE_MESSAGE)

    logger.info(
        "Assigned teacher %s to %s %s (subject=%s, form_teacher=%s)",
        teacher.id,
        target.kind.value.lower(),
        target.id,
        subject,
        payload.is_primary,
    )
    if notify is not None:
        notify(_notification(NotificationKind.ASSIGNED, school, target, teacher, subject, payload.is_primary))
    return await build_class_view(db, target)


async def remove_teacher_from_class(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
    teacher_id: UUID,
    subject: Optional[str] = None,
    notify: Optional[Notifier] = None,
) -> ClassResponse:
    """Remove one assignment. Without `subject` the teacher's first row on the class goes."""
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)
    teacher = await _get_school_teacher(db, school, teacher_id)
    subject = _clean_subject(subject)

    stmt = select(ClassTeacher).where(target.match(ClassTeacher), ClassTeacher.teacher_id == teacher.id)
    if subject is not None:
        stmt = stmt.where(ClassTeacher.subject == subject)
    result = await db.execute(stmt.order_by(ClassTeacher.created_at).limit(1))
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundError("Teacher assignment not found")

    removed_subject = row.subject
    await db.delete(row)
    await db.commit()
    logger.info("Removed teacher %s from %s %s", teacher.id, target.kind.value.lower(), target.id)

    if notify is not None:
        notify(_notification(NotificationKind.REMOVED, school, target, teacher, removed_subject))
    return await build_class_view(db, target)
