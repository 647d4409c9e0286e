"""Persisted timetables: list, bulk save, auto-generated preview and break-row insert.

A timetable is the set of TimetablePeriod rows for one class or arm in one term.
"""

import logging
import random
from itertools import combinations
from typing import Dict, Iterable, List, Sequence, Union
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased, selectinload

from classbook.api.v1.classes.resolver import ClassTarget, lock_target, resolve_class_target, resolve_school
from classbook.api.v1.terms.service import get_school_term
from classbook.core.enums import WEEKDAYS, DayOfWeek, PeriodType, SchoolType, TargetKind
from classbook.core.exceptions import BadRequestError, ConflictError, NotFoundError
from classbook.core.models import (
    ClassArm,
    ClassLevel,
    School,
    SchoolClass,
    Subject,
    Teacher,
    TimetablePeriod,
)

from .generator import GridPeriod, PoolItem, generate_timetable, insert_break_row
from .schemas import (
    AutoGenerateRequest,
    InsertRowRequest,
    TimetablePeriodIn,
    TimetablePeriodResponse,
    TimetableSaveRequest,
)

logger = logging.getLogger(__name__)


def _fmt(t) -> str:
    return t.strftime("%H:%M")


def _to_response(p: TimetablePeriod) -> TimetablePeriodResponse:
    return TimetablePeriodResponse(
        id=p.id,
        day_of_week=DayOfWeek(p.day_of_week),
        start_time=p.start_time,
        end_time=p.end_time,
        type=PeriodType(p.type),
        subject_id=p.subject_id,
        subject_name=p.subject.name if p.subject else None,
        course_id=p.course_id,
        course_name=p.course.name if p.course else None,
        teacher_id=p.teacher_id,
        teacher_name=p.teacher.full_name if p.teacher else None,
    )


def _to_grid(p: TimetablePeriod) -> GridPeriod:
    return GridPeriod(
        day_of_week=DayOfWeek(p.day_of_week),
        start_time=p.start_time,
        end_time=p.end_time,
        type=PeriodType(p.type),
        subject_id=p.subject_id,
        course_id=p.course_id,
        teacher_id=p.teacher_id,
    )


def _excluding(target: ClassTarget):
    """Periods that do not belong to this class or arm (NULL-safe)."""
    column = TimetablePeriod.class_arm_id if target.kind == TargetKind.CLASS_ARM else TimetablePeriod.class_id
    return or_(column.is_(None), column != target.id)


async def _load_periods(db: AsyncSession, term_id: UUID, target: ClassTarget) -> List[TimetablePeriod]:
    result = await db.execute(
        select(TimetablePeriod)
        .options(
            selectinload(TimetablePeriod.subject),
            selectinload(TimetablePeriod.course),
            selectinload(TimetablePeriod.teacher),
        )
        .where(TimetablePeriod.term_id == term_id, target.match(TimetablePeriod))
    )
    periods = list(result.scalars().all())
    order = {day.value: i for i, day in enumerate(DayOfWeek)}
    periods.sort(key=lambda p: (order[p.day_of_week], p.start_time))
    return periods


async def _resolve(db: AsyncSession, school_ref: Union[str, UUID], term_id: UUID, class_id: str):
    school = await resolve_school(db, school_ref)
    term = await get_school_term(db, school, term_id)
    target = await resolve_class_target(db, school, class_id)
    return school, term, target


async def list_timetable(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    term_id: UUID,
    class_id: str,
) -> List[TimetablePeriodResponse]:
    _, term, target = await _resolve(db, school_ref, term_id, class_id)
    return [_to_response(p) for p in await _load_periods(db, term.id, target)]


def _check_times(periods: Sequence[TimetablePeriodIn]) -> None:
    for p in periods:
        if not p.start_time < p.end_time:
            raise BadRequestError(
                f"Start time must be before end time ({p.day_of_week.value} {_fmt(p.start_time)}-{_fmt(p.end_time)})"
            )
    by_day: Dict[DayOfWeek, List[TimetablePeriodIn]] = {}
    for p in periods:
        by_day.setdefault(p.day_of_week, []).append(p)
    for day, day_periods in by_day.items():
        for a, b in combinations(day_periods, 2):
            if a.start_time < b.end_time and b.start_time < a.end_time:
                raise ConflictError(
                    f"Periods overlap on {day.value}: {_fmt(a.start_time)}-{_fmt(a.end_time)} "
                    f"and {_fmt(b.start_time)}-{_fmt(b.end_time)}"
                )


async def _check_references(
    db: AsyncSession,
    school: School,
    periods: Sequence[TimetablePeriodIn],
) -> Dict[UUID, Teacher]:
    subject_ids = {p.subject_id for p in periods if p.subject_id}
    course_ids = {p.course_id for p in periods if p.course_id}
    teacher_ids = {p.teacher_id for p in periods if p.teacher_id}

    if subject_ids:
        found = await db.execute(
            select(Subject.id).where(Subject.id.in_(subject_ids), Subject.school_id == school.id)
        )
        if set(found.scalars().all()) != subject_ids:
            raise NotFoundError("Subject not found")
    if course_ids:
        found = await db.execute(
            select(SchoolClass.id).where(
                SchoolClass.id.in_(course_ids),
                SchoolClass.school_id == school.id,
                SchoolClass.type == SchoolType.TERTIARY.value,
            )
        )
        if set(found.scalars().all()) != course_ids:
            raise NotFoundError("Course not found")
    teachers: Dict[UUID, Teacher] = {}
    if teacher_ids:
        found = await db.execute(
            select(Teacher).where(Teacher.id.in_(teacher_ids), Teacher.school_id == school.id)
        )
        teachers = {t.id: t for t in found.scalars().all()}
        if set(teachers) != teacher_ids:
            raise NotFoundError("Teacher not found in this school")
    return teachers


async def _check_teacher_clashes(
    db: AsyncSession,
    term_id: UUID,
    target: ClassTarget,
    periods: Sequence[TimetablePeriodIn],
    teachers: Dict[UUID, Teacher],
) -> None:
    """A teacher cannot be in two classes at overlapping times in the same term."""
    if not teachers:
        return
    other_class = aliased(SchoolClass)
    result = await db.execute(
        select(
            TimetablePeriod.teacher_id,
            TimetablePeriod.day_of_week,
            TimetablePeriod.start_time,
            TimetablePeriod.end_time,
            ClassLevel.name,
            ClassArm.name,
            other_class.name,
        )
        .outerjoin(ClassArm, TimetablePeriod.class_arm_id == ClassArm.id)
        .outerjoin(ClassLevel, ClassArm.class_level_id == ClassLevel.id)
        .outerjoin(other_class, TimetablePeriod.class_id == other_class.id)
        .where(
            TimetablePeriod.term_id == term_id,
            TimetablePeriod.type == PeriodType.LESSON.value,
            TimetablePeriod.teacher_id.in_(list(teachers)),
            _excluding(target),
        )
    )
    booked = result.all()
    for p in periods:
        if not p.teacher_id:
            continue
        for teacher_id, day, start, end, level_name, arm_name, class_name in booked:
            if teacher_id != p.teacher_id or day != p.day_of_week.value:
                continue
            if p.start_time < end and start < p.end_time:
                other = f"{level_name} {arm_name}" if arm_name else class_name
                raise ConflictError(
                    f"{teachers[teacher_id].full_name} is already teaching {other} "
                    f"at {_fmt(start)}-{_fmt(end)} on {day}"
                )


def _new_period(term_id: UUID, target: ClassTarget, p: GridPeriod) -> TimetablePeriod:
    return TimetablePeriod(
        term_id=term_id,
        day_of_week=p.day_of_week.value,
        start_time=p.start_time,
        end_time=p.end_time,
        type=p.type.value,
        subject_id=p.subject_id,
        course_id=p.course_id,
        teacher_id=p.teacher_id,
        **target.link(),
    )


async def _replace_periods(
    db: AsyncSession,
    term_id: UUID,
    target: ClassTarget,
    periods: Iterable[GridPeriod],
) -> None:
    await db.execute(
        delete(TimetablePeriod).where(TimetablePeriod.term_id == term_id, target.match(TimetablePeriod))
    )
    for p in periods:
        db.add(_new_period(term_id, target, p))


async def bulk_save_timetable(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: TimetableSaveRequest,
) -> List[TimetablePeriodResponse]:
    """Replace the class's timetable for the term with `payload.periods`."""
    school, term, target = await _resolve(db, school_ref, payload.term_id, payload.class_id)
    _check_times(payload.periods)
    teachers = await _check_references(db, school, payload.periods)

    await lock_target(db, target)
    await _check_teacher_clashes(db, term.id, target, payload.periods, teachers)
    await _replace_periods(
        db,
        term.id,
        target,
        (
            GridPeriod(
                day_of_week=p.day_of_week,
                start_time=p.start_time,
                end_time=p.end_time,
                type=p.type,
                subject_id=p.subject_id,
                course_id=p.course_id,
                teacher_id=p.teacher_id,
            )
            for p in payload.periods
        ),
    )
    await db.commit()
    logger.info(
        "Saved %d timetable period(s) for %s %s in term %s",
        len(payload.periods),
        target.kind.value.lower(),
        target.id,
        term.id,
    )
    return [_to_response(p) for p in await _load_periods(db, term.id, target)]


async def _generation_pool(db: AsyncSession, school: School, target: ClassTarget) -> List[PoolItem]:
    """Courses for TERTIARY classes, otherwise the school's subjects for that type (and level)."""
    if target.type == SchoolType.TERTIARY:
        result = await db.execute(
            select(SchoolClass.id, SchoolClass.name)
            .where(
                SchoolClass.school_id == school.id,
                SchoolClass.type == SchoolType.TERTIARY.value,
                SchoolClass.is_active.is_(True),
            )
            .order_by(SchoolClass.name)
        )
        return [PoolItem(id=i, name=n) for i, n in result.all()]

    stmt = select(Subject.id, Subject.name).where(
        Subject.school_id == school.id,
        Subject.is_active.is_(True),
        or_(Subject.school_type == target.type.value, Subject.school_type.is_(None)),
    )
    if target.kind == TargetKind.CLASS_ARM:
        stmt = stmt.where(
            or_(Subject.class_level_id.is_(None), Subject.class_level_id == target.class_level_id)
        )
    result = await db.execute(stmt.order_by(Subject.name))
    return [PoolItem(id=i, name=n) for i, n in result.all()]


async def preview_auto_generated_timetable(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: AutoGenerateRequest,
) -> List[TimetablePeriodResponse]:
    """Run the generator over the saved grid. Nothing is persisted; save with PUT."""
    school, term, target = await _resolve(db, school_ref, payload.term_id, payload.class_id)
    saved = await _load_periods(db, term.id, target)
    items = await _generation_pool(db, school, target)

    generated = generate_timetable(
        [_to_grid(p) for p in saved],
        items,
        target.type,
        rng=random.Random(payload.seed),
    )

    names = {item.id: item.name for item in items}
    for p in saved:
        if p.subject:
            names[p.subject_id] = p.subject.name
        if p.course:
            names[p.course_id] = p.course.name
    teacher_names = {p.teacher_id: p.teacher.full_name for p in saved if p.teacher}
    return [
        TimetablePeriodResponse(
            day_of_week=g.day_of_week,
            start_time=g.start_time,
            end_time=g.end_time,
            type=g.type,
            subject_id=g.subject_id,
            subject_name=names.get(g.subject_id) if g.subject_id else None,
            course_id=g.course_id,
            course_name=names.get(g.course_id) if g.course_id else None,
            teacher_id=g.teacher_id,
            teacher_name=teacher_names.get(g.teacher_id),
        )
        for g in generated
    ]


async def insert_timetable_row(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: InsertRowRequest,
) -> List[TimetablePeriodResponse]:
    """Add a BREAK/LUNCH/ASSEMBLY row on Monday to Friday at the given times."""
    _, term, target = await _resolve(db, school_ref, payload.term_id, payload.class_id)
    rows = insert_break_row([], payload.type, payload.start_time, payload.end_time)

    await lock_target(db, target)
    weekdays = {day.value for day in WEEKDAYS}
    for p in await _load_periods(db, term.id, target):
        if p.day_of_week in weekdays and p.start_time < payload.end_time and payload.start_time < p.end_time:
            raise ConflictError(
                f"{payload.type.value.capitalize()} {_fmt(payload.start_time)}-{_fmt(payload.end_time)} "
                f"overlaps an existing period on {p.day_of_week}"
            )

    for row in rows:
        db.add(_new_period(term.id, target, row))
    await db.commit()
    return [_to_response(p) for p in await _load_periods(db, term.id, target)]
