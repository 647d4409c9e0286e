"""Classes and class arms: listing, CRUD, enrollment and force-aware deletion.
Every operation resolves its class exactly once through the resolver."""

import logging
from datetime import date, datetime
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, joinedload

from classbook.core.enums import SchoolType, TargetKind
from classbook.core.exceptions import BadRequestError, ConflictError, NotFoundError
from classbook.core.models import (
    ClassArm,
    ClassLevel,
    ClassTeacher,
    Enrollment,
    School,
    SchoolClass,
    Student,
    Teacher,
    TimetablePeriod,
)

from .resolver import (
    ClassTarget,
    resolve_class_target,
    resolve_school,
    target_from_arm,
    target_from_class,
)
from .schemas import (
    ClassCreate,
    ClassDeleteResponse,
    ClassResponse,
    ClassStudentResponse,
    ClassTeacherInfo,
    ClassUpdate,
    EnrollmentCreate,
    EnrollmentInfo,
)

logger = logging.getLogger(__name__)


def current_academic_year(today: Optional[date] = None) -> str:
    """Academic years start in September: 2024/2025 runs Sep 2024 - Aug 2025."""
    today = today or date.today()
    if today.month < 9:
        return f"{today.year - 1}/{today.year}"
    return f"{today.year}/{today.year + 1}"


def validate_school_type_for_class(school: School, class_type: SchoolType) -> None:
    if class_type == SchoolType.PRIMARY and not school.has_primary:
        raise BadRequestError("School does not have primary level")
    if class_type == SchoolType.SECONDARY and not school.has_secondary:
        raise BadRequestError("School does not have secondary level")
    if class_type == SchoolType.TERTIARY and not school.has_tertiary:
        raise BadRequestError("School does not have tertiary level")


def _teacher_info(ct: ClassTeacher) -> ClassTeacherInfo:
    return ClassTeacherInfo(
        id=ct.id,
        teacher_id=ct.teacher_id,
        first_name=ct.teacher.first_name,
        last_name=ct.teacher.last_name,
        email=ct.teacher.email,
        subject=ct.subject or ct.teacher.subject,
        is_primary=ct.is_primary,
        created_at=ct.created_at,
    )


async def _class_teachers(db: AsyncSession, target: ClassTarget) -> List[ClassTeacherInfo]:
    result = await db.execute(
        select(ClassTeacher)
        .options(joinedload(ClassTeacher.teacher))
        .where(target.match(ClassTeacher))
        .order_by(ClassTeacher.created_at)
    )
    return [_teacher_info(ct) for ct in result.scalars().all()]


def _student_filter(target: ClassTarget):
    """Enrollments counted as members of the class."""
    if target.kind == TargetKind.CLASS_ARM:
        return and_(
            Enrollment.class_arm_id == target.id,
            Enrollment.academic_year == target.academic_year,
        )
    clause = Enrollment.class_id == target.id
    if target.class_level_name:
        # Older enrollments reference only the level name and year
        clause = or_(
            clause,
            and_(
                Enrollment.class_id.is_(None),
                Enrollment.class_arm_id.is_(None),
                Enrollment.class_level == target.class_level_name,
            ),
        )
    return and_(clause, Enrollment.academic_year == target.academic_year)


async def _count_students(db: AsyncSession, target: ClassTarget) -> int:
    result = await db.execute(
        select(func.count(Enrollment.id)).where(
            Enrollment.school_id == target.school_id,
            Enrollment.is_active.is_(True),
            _student_filter(target),
        )
    )
    return result.scalar_one()


async def build_class_view(db: AsyncSession, target: ClassTarget) -> ClassResponse:
    teachers = await _class_teachers(db, target)
    students_count = await _count_students(db, target)
    if target.kind == TargetKind.CLASS_ARM:
        arm = await db.get(ClassArm, target.id)
        return ClassResponse(
            id=arm.id,
            kind=target.kind,
            name=target.display_name,
            class_level=target.class_level_name,
            type=target.type,
            academic_year=arm.academic_year,
            is_active=arm.is_active,
            created_at=arm.created_at,
            teachers=teachers,
            students_count=students_count,
            class_arm_id=arm.id,
            class_level_id=target.class_level_id,
        )
    cls = await db.get(SchoolClass, target.id)
    return ClassResponse(
        id=cls.id,
        kind=target.kind,
        name=cls.name,
        code=cls.code,
        class_level=cls.class_level,
        type=target.type,
        academic_year=cls.academic_year,
        credit_hours=cls.credit_hours,
        description=cls.description,
        is_active=cls.is_active,
        created_at=cls.created_at,
        teachers=teachers,
        students_count=students_count,
    )


async def create_class(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: ClassCreate,
) -> ClassResponse:
    school = await resolve_school(db, school_ref)
    validate_school_type_for_class(school, payload.type)

    obj = SchoolClass(
        school_id=school.id,
        name=payload.name.strip(),
        code=payload.code or None,
        class_level=payload.class_level or None,
        type=payload.type.value,
        academic_year=payload.academic_year,
        credit_hours=payload.credit_hours,
        description=payload.description or None,
        is_active=True,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    logger.info("Created %s class %s (%s) for school %s", obj.type, obj.name, obj.id, school.id)
    return await build_class_view(db, target_from_class(obj))


async def list_classes(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    academic_year: Optional[str] = None,
    type_filter: Optional[SchoolType] = None,
) -> List[ClassResponse]:
    """
    TERTIARY: legacy classes (courses) of that type.
    PRIMARY/SECONDARY or no filter: active class arms, ordered by level then arm name.
    """
    school = await resolve_school(db, school_ref)
    year = academic_year or current_academic_year()

    if type_filter == SchoolType.TERTIARY:
        result = await db.execute(
            select(SchoolClass)
            .where(
                SchoolClass.school_id == school.id,
                SchoolClass.academic_year == year,
                SchoolClass.type == SchoolType.TERTIARY.value,
            )
            .order_by(SchoolClass.name)
        )
        return [await build_class_view(db, target_from_class(c)) for c in result.scalars().all()]

    types = [type_filter.value] if type_filter else [SchoolType.PRIMARY.value, SchoolType.SECONDARY.value]
    result = await db.execute(
        select(ClassArm)
        .join(ClassArm.class_level)
        .options(contains_eager(ClassArm.class_level))
        .where(
            ClassLevel.school_id == school.id,
            ClassLevel.type.in_(types),
            ClassArm.academic_year == year,
            ClassArm.is_active.is_(True),
        )
        .order_by(ClassLevel.level, ClassArm.name)
    )
    return [await build_class_view(db, target_from_arm(a, school.id)) for a in result.scalars().all()]


async def get_class(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
) -> ClassResponse:
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)
    return await build_class_view(db, target)


def _arm_name_from_update(level_name: str, requested: str) -> str:
    """Accept either the arm name ("Gold") or the full display name ("JSS 1 Gold")."""
    name = requested.strip()
    if name.startswith(level_name + " "):
        name = name[len(level_name) + 1:].strip()
    return name or "A"


async def update_class(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
    payload: ClassUpdate,
) -> ClassResponse:
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)

    if target.kind == TargetKind.CLASS_ARM:
        arm = await db.get(ClassArm, target.id)
        if payload.name is None:
            return await build_class_view(db, target)
        arm.name = _arm_name_from_update(target.class_level_name, payload.name)
        await db.commit()
        return await build_class_view(db, target_from_arm(arm, school.id))

    cls = await db.get(SchoolClass, target.id)
    changes = payload.model_dump(exclude_unset=True)
    if changes.get("type") is not None:
        validate_school_type_for_class(school, changes["type"])
        changes["type"] = changes["type"].value
    # Renaming is allowed with students enrolled: enrollments reference the id
    for field, value in changes.items():
        setattr(cls, field, value)
    await db.commit()
    await db.refresh(cls)
    return await build_class_view(db, target_from_class(cls))


async def delete_class(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
    force: bool = False,
) -> ClassDeleteResponse:
    """
    Delete a class or arm. Active enrollments block deletion unless force is set,
    in which case they are closed (is_active=false, end_date=now) first.
    """
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)

    count_result = await db.execute(
        select(func.count(Enrollment.id)).where(target.match(Enrollment), Enrollment.is_active.is_(True))
    )
    active = count_result.scalar_one()
    if active and not force:
        label = "ClassArm" if target.kind == TargetKind.CLASS_ARM else "class"
        raise BadRequestError(
            f'Cannot delete {label} "{target.display_name}" because it has {active} active student '
            "enrollment(s). Please transfer or remove students first, or use force delete."
        )

    if active:
        await db.execute(
            update(Enrollment)
            .where(target.match(Enrollment), Enrollment.is_active.is_(True))
            .values(is_active=False, end_date=datetime.utcnow())
        )

    await db.execute(delete(ClassTeacher).where(target.match(ClassTeacher)))
    await db.execute(delete(TimetablePeriod).where(target.match(TimetablePeriod)))
    model = ClassArm if target.kind == TargetKind.CLASS_ARM else SchoolClass
    await db.execute(delete(model).where(model.id == target.id))
    await db.commit()
    logger.info(
        "Deleted %s %s (%s); closed %d enrollment(s)",
        target.kind.value.lower(),
        target.display_name,
        target.id,
        active,
    )
    return ClassDeleteResponse(message=f"{target.display_name} deleted", closed_enrollments=active)


def _student_response(e: Enrollment, student: Student) -> ClassStudentResponse:
    return ClassStudentResponse(
        id=student.id,
        first_name=student.first_name,
        last_name=student.last_name,
        email=student.email,
        enrollment=EnrollmentInfo(
            id=e.id,
            class_level=e.class_level,
            academic_year=e.academic_year,
            enrollment_date=e.enrollment_date,
        ),
    )


async def list_class_students(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
) -> List[ClassStudentResponse]:
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)
    result = await db.execute(
        select(Enrollment)
        .join(Enrollment.student)
        .options(contains_eager(Enrollment.student))
        .where(
            Enrollment.school_id == school.id,
            Enrollment.is_active.is_(True),
            _student_filter(target),
        )
        .order_by(Student.last_name, Student.first_name)
    )
    return [_student_response(e, e.student) for e in result.scalars().all()]


async def enroll_student(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    class_id: Union[str, UUID],
    payload: EnrollmentCreate,
) -> ClassStudentResponse:
    school = await resolve_school(db, school_ref)
    target = await resolve_class_target(db, school, class_id)

    student = await db.get(Student, payload.student_id)
    if not student or student.school_id != school.id:
        raise NotFoundError("Student not found in this school")

    existing = await db.execute(
        select(Enrollment.id).where(
            Enrollment.student_id == student.id,
            Enrollment.is_active.is_(True),
            target.match(Enrollment),
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("Student is already enrolled in this class")

    try:
        obj = Enrollment(
            school_id=school.id,
            student_id=student.id,
            class_level=target.class_level_name,
            academic_year=target.academic_year,
            is_active=True,
            **target.link(),
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Enrollment could not be created")
    return _student_response(obj, student)


async def get_teacher_classes(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    teacher_id: UUID,
) -> List[ClassResponse]:
    """
    Classes a teacher is linked to:
    arms from ClassTeacher rows (form/subject teacher) and from LESSON timetable periods,
    plus legacy classes from ClassTeacher rows.
    """
    school = await resolve_school(db, school_ref)
    teacher = await db.get(Teacher, teacher_id)
    if not teacher or teacher.school_id != school.id:
        raise NotFoundError("Teacher not found in this school")

    assigned_arms = select(ClassTeacher.class_arm_id).where(
        ClassTeacher.teacher_id == teacher.id,
        ClassTeacher.class_arm_id.is_not(None),
    )
    scheduled_arms = select(TimetablePeriod.class_arm_id).where(
        TimetablePeriod.teacher_id == teacher.id,
        TimetablePeriod.class_arm_id.is_not(None),
        TimetablePeriod.type == "LESSON",
    )
    arm_result = await db.execute(
        select(ClassArm)
        .join(ClassArm.class_level)
        .options(contains_eager(ClassArm.class_level))
        .where(
            ClassLevel.school_id == school.id,
            ClassArm.is_active.is_(True),
            or_(ClassArm.id.in_(assigned_arms), ClassArm.id.in_(scheduled_arms)),
        )
        .order_by(ClassLevel.level, ClassArm.name)
    )
    views = [await build_class_view(db, target_from_arm(a, school.id)) for a in arm_result.scalars().all()]

    cls_result = await db.execute(
        select(SchoolClass)
        .where(
            SchoolClass.school_id == school.id,
            SchoolClass.is_active.is_(True),
            SchoolClass.id.in_(
                select(ClassTeacher.class_id).where(
                    ClassTeacher.teacher_id == teacher.id,
                    ClassTeacher.class_id.is_not(None),
                )
            ),
        )
        .order_by(SchoolClass.name)
    )
    views.extend([await build_class_view(db, target_from_class(c)) for c in cls_result.scalars().all()])
    return views
