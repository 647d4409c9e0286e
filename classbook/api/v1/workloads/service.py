"""Teacher workload for a term: per-subject candidates, least-loaded pick and the admin summary.

A teacher is competent for a subject when the subject name appears in the
teacher's comma-separated `subject` field (case-insensitive).
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence, Union
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from classbook.api.v1.classes.resolver import resolve_school
from classbook.api.v1.terms.service import get_school_term
from classbook.core.enums import PeriodType, SchoolType, WorkloadBand
from classbook.core.exceptions import NotFoundError
from classbook.core.models import ClassArm, ClassLevel, School, SchoolClass, Subject, Teacher, TimetablePeriod

from .ranker import WorkloadCandidate, classify_workload, rank_teachers, workload_warning
from .schemas import (
    LeastLoadedTeacherResponse,
    PeriodCount,
    RankedTeacherResponse,
    TeacherWorkload,
    UnassignedSubject,
    WorkloadSummaryResponse,
    WorkloadWarning,
)


def teacher_subjects(text: Optional[str]) -> List[str]:
    if not text:
        return []
    return [s.strip().lower() for s in text.split(",") if s.strip()]


def is_competent(teacher: Teacher, subject_name: str) -> bool:
    return subject_name.strip().lower() in teacher_subjects(teacher.subject)


async def count_lesson_periods(
    db: AsyncSession,
    term_id: UUID,
    teacher_ids: Sequence[UUID],
) -> Dict[UUID, int]:
    """LESSON periods per teacher in a term. Teachers with none are absent from the result."""
    if not teacher_ids:
        return {}
    result = await db.execute(
        select(TimetablePeriod.teacher_id, func.count(TimetablePeriod.id))
        .where(
            TimetablePeriod.term_id == term_id,
            TimetablePeriod.type == PeriodType.LESSON.value,
            TimetablePeriod.teacher_id.in_(list(teacher_ids)),
        )
        .group_by(TimetablePeriod.teacher_id)
    )
    return {teacher_id: count for teacher_id, count in result.all()}


async def _active_teachers(db: AsyncSession, school: School) -> List[Teacher]:
    result = await db.execute(
        select(Teacher)
        .where(Teacher.school_id == school.id, Teacher.is_active.is_(True))
        .order_by(Teacher.last_name, Teacher.first_name)
    )
    return list(result.scalars().all())


async def _get_school_subject(db: AsyncSession, school: School, subject_id: UUID) -> Subject:
    subject = await db.get(Subject, subject_id)
    if not subject or subject.school_id != school.id:
        raise NotFoundError("Subject not found")
    return subject


async def _ranked_candidates(
    db: AsyncSession,
    school: School,
    subject: Subject,
    term_id: UUID,
    exclude_teacher_ids: Iterable[UUID] = (),
):
    excluded = set(exclude_teacher_ids)
    competent = [
        t for t in await _active_teachers(db, school)
        if t.id not in excluded and is_competent(t, subject.name)
    ]
    counts = await count_lesson_periods(db, term_id, [t.id for t in competent])
    return rank_teachers(
        WorkloadCandidate(
            teacher_id=t.id,
            first_name=t.first_name,
            last_name=t.last_name,
            period_count=counts.get(t.id, 0),
        )
        for t in competent
    )


async def get_subject_teacher_candidates(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    subject_id: UUID,
    term_id: UUID,
) -> List[RankedTeacherResponse]:
    school = await resolve_school(db, school_ref)
    term = await get_school_term(db, school, term_id)
    subject = await _get_school_subject(db, school, subject_id)
    ranked = await _ranked_candidates(db, school, subject, term.id)
    return [RankedTeacherResponse.model_validate(r) for r in ranked]


async def get_least_loaded_teacher(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    subject_id: UUID,
    term_id: UUID,
    exclude_teacher_ids: Iterable[UUID] = (),
) -> Optional[LeastLoadedTeacherResponse]:
    school = await resolve_school(db, school_ref)
    term = await get_school_term(db, school, term_id)
    subject = await _get_school_subject(db, school, subject_id)
    ranked = await _ranked_candidates(db, school, subject, term.id, exclude_teacher_ids)
    if not ranked:
        return None
    best = ranked[0]
    return LeastLoadedTeacherResponse(
        id=best.teacher_id,
        first_name=best.first_name,
        last_name=best.last_name,
        period_count=best.period_count,
    )


async def get_workload_summary(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    term_id: UUID,
    school_type: Optional[SchoolType] = None,
) -> WorkloadSummaryResponse:
    """
    Per-teacher totals for the term, busiest first. Teachers without periods are left out.
    Also lists HIGH/OVERLOADED warnings and subjects that no active teacher can teach.
    """
    school = await resolve_school(db, school_ref)
    term = await get_school_term(db, school, term_id)
    teachers = await _active_teachers(db, school)

    course = aliased(SchoolClass)
    owner = aliased(SchoolClass)
    stmt = (
        select(
            TimetablePeriod,
            Subject.name,
            course.name,
            ClassArm.name,
            ClassLevel.name,
            ClassLevel.type,
            owner.name,
            owner.type,
        )
        .outerjoin(Subject, TimetablePeriod.subject_id == Subject.id)
        .outerjoin(course, TimetablePeriod.course_id == course.id)
        .outerjoin(ClassArm, TimetablePeriod.class_arm_id == ClassArm.id)
        .outerjoin(ClassLevel, ClassArm.class_level_id == ClassLevel.id)
        .outerjoin(owner, TimetablePeriod.class_id == owner.id)
        .where(
            TimetablePeriod.term_id == term.id,
            TimetablePeriod.type == PeriodType.LESSON.value,
            TimetablePeriod.teacher_id.is_not(None),
        )
    )
    if school_type is not None:
        stmt = stmt.where(or_(ClassLevel.type == school_type.value, owner.type == school_type.value))
    rows = (await db.execute(stmt)).all()

    totals: Dict[UUID, int] = defaultdict(int)
    by_subject: Dict[UUID, Dict[str, PeriodCount]] = defaultdict(dict)
    by_class: Dict[UUID, Dict[str, PeriodCount]] = defaultdict(dict)
    for period, subject_name, course_name, arm_name, level_name, _, class_name, _ in rows:
        tid = period.teacher_id
        totals[tid] += 1

        subject_key = period.subject_id or period.course_id
        if subject_key is not None:
            entry = by_subject[tid].setdefault(str(subject_key), PeriodCount(name=subject_name or course_name, count=0))
            entry.count += 1

        if period.class_arm_id is not None:
            class_key, label = period.class_arm_id, f"{level_name} {arm_name}"
        else:
            class_key, label = period.class_id, class_name or "Unknown"
        entry = by_class[tid].setdefault(str(class_key), PeriodCount(name=label, count=0))
        entry.count += 1

    results = []
    for t in teachers:
        total = totals.get(t.id, 0)
        if not total:
            continue
        results.append(
            TeacherWorkload(
                teacher_id=t.id,
                first_name=t.first_name,
                last_name=t.last_name,
                total_periods=total,
                class_count=len(by_class[t.id]),
                subject_count=len(by_subject[t.id]),
                periods_by_subject=by_subject[t.id],
                periods_by_class=by_class[t.id],
                band=classify_workload(total),
            )
        )
    results.sort(key=lambda w: w.total_periods, reverse=True)

    average = sum(w.total_periods for w in results) / len(results) if results else 0.0
    warnings = []
    for w in results:
        if w.band not in (WorkloadBand.HIGH, WorkloadBand.OVERLOADED):
            continue
        name = f"{w.first_name} {w.last_name}"
        warnings.append(
            WorkloadWarning(
                teacher_id=w.teacher_id,
                teacher_name=name,
                period_count=w.total_periods,
                band=w.band,
                message=workload_warning(name, w.total_periods, w.band),
            )
        )

    subject_stmt = select(Subject).where(Subject.school_id == school.id, Subject.is_active.is_(True))
    if school_type is not None:
        subject_stmt = subject_stmt.where(
            or_(Subject.school_type == school_type.value, Subject.school_type.is_(None))
        )
    subjects = (await db.execute(subject_stmt.order_by(Subject.name))).scalars().all()
    unassigned = [
        UnassignedSubject(
            subject_id=s.id,
            subject_name=s.name,
            message=f"No teachers assigned to {s.name}. Add competent teachers before generating timetables.",
        )
        for s in subjects
        if not any(is_competent(t, s.name) for t in teachers)
    ]

    return WorkloadSummaryResponse(
        teachers=results,
        average_periods=round(average, 1),
        warnings=warnings,
        unassigned_subjects=unassigned,
    )
