"""
Timetable auto-fill. Pure functions over in-memory grid periods; nothing here
touches the database.

Rules for each weekday (Saturday and Sunday are passed through untouched):
- slots that already hold a subject or course are never changed;
- ASSEMBLY, BREAK and LUNCH are added from the school-type template when the
  day has none of that type, unless the template time collides with another
  period (an empty lesson at exactly that time is converted instead);
- one or two empty lesson slots are kept free;
- every other empty lesson slot gets a subject drawn from a weighted pool in
  which core subjects appear more often.
"""

import logging
import random
from dataclasses import dataclass, replace
from datetime import time
from typing import Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from classbook.core.enums import WEEKDAYS, DayOfWeek, PeriodType, SchoolType
from classbook.core.exceptions import BadRequestError

from .schedules import ScheduleSlot, get_schedule

logger = logging.getLogger(__name__)

CORE_SUBJECT_KEYWORDS = ("english", "mathematics", "math", "basic science", "science")
CORE_WEIGHT = 3
ELECTIVE_WEIGHT = 2
MAX_SAME_SUBJECT_PER_DAY = 2
MAX_FREE_PERIODS_PER_DAY = 2

NON_LESSON_TYPES = (PeriodType.ASSEMBLY, PeriodType.BREAK, PeriodType.LUNCH)
DAY_ORDER = {day: index for index, day in enumerate(DayOfWeek)}


@dataclass
class GridPeriod:
    day_of_week: DayOfWeek
    start_time: time
    end_time: time
    type: PeriodType = PeriodType.LESSON
    subject_id: Optional[UUID] = None
    course_id: Optional[UUID] = None
    teacher_id: Optional[UUID] = None
    name: Optional[str] = None

    @property
    def is_filled(self) -> bool:
        return self.subject_id is not None or self.course_id is not None

    def overlaps(self, start: time, end: time) -> bool:
        return self.start_time < end and start < self.end_time


@dataclass(frozen=True)
class PoolItem:
    id: UUID
    name: str


def is_core_subject(name: str) -> bool:
    lowered = name.lower()
    return any(keyword in lowered for keyword in CORE_SUBJECT_KEYWORDS)


def build_weighted_pool(items: Iterable[PoolItem]) -> List[PoolItem]:
    pool = []
    for item in items:
        weight = CORE_WEIGHT if is_core_subject(item.name) else ELECTIVE_WEIGHT
        pool.extend([item] * weight)
    return pool


def sort_periods(periods: Iterable[GridPeriod]) -> List[GridPeriod]:
    return sorted(periods, key=lambda p: (DAY_ORDER[p.day_of_week], p.start_time, p.end_time))


def _lesson_slots(existing: Sequence[GridPeriod], template: List[ScheduleSlot]) -> List[Tuple[time, time]]:
    slots = sorted({(p.start_time, p.end_time) for p in existing if p.type == PeriodType.LESSON})
    if slots:
        return slots
    return [(s.start_time, s.end_time) for s in template if s.type == PeriodType.LESSON]


def _add_non_lesson_periods(
    day: DayOfWeek,
    day_periods: List[GridPeriod],
    template: List[ScheduleSlot],
) -> List[GridPeriod]:
    """Returns the periods created for the day; converted lessons are changed in place."""
    added = []
    for slot in template:
        if slot.type not in NON_LESSON_TYPES:
            continue
        if any(p.type == slot.type for p in day_periods):
            continue
        colliding = [p for p in day_periods if p.overlaps(slot.start_time, slot.end_time)]
        if not colliding:
            period = GridPeriod(
                day_of_week=day,
                start_time=slot.start_time,
                end_time=slot.end_time,
                type=slot.type,
                name=slot.label,
            )
            added.append(period)
            day_periods.append(period)
            continue
        target = colliding[0]
        if (
            len(colliding) == 1
            and target.type == PeriodType.LESSON
            and not target.is_filled
            and (target.start_time, target.end_time) == (slot.start_time, slot.end_time)
        ):
            target.type = slot.type
            target.teacher_id = None
            target.name = slot.label
            continue
        logger.debug(
            "Skipping %s at %s-%s on %s: slot is taken",
            slot.type.value,
            slot.start_time,
            slot.end_time,
            day.value,
        )
    return added


def _previous_subject(day_periods: List[GridPeriod], start: time) -> Optional[UUID]:
    earlier = [
        p for p in day_periods
        if p.type == PeriodType.LESSON and p.is_filled and p.start_time < start
    ]
    if not earlier:
        return None
    last = max(earlier, key=lambda p: p.start_time)
    return last.subject_id or last.course_id


def _count_on_day(day_periods: List[GridPeriod], item_id: UUID) -> int:
    return sum(1 for p in day_periods if p.subject_id == item_id or p.course_id == item_id)


def _pick(
    pool: List[PoolItem],
    day_periods: List[GridPeriod],
    start: time,
    max_same_subject_per_day: int,
) -> PoolItem:
    previous = _previous_subject(day_periods, start)
    for candidate in pool:
        if candidate.id == previous:
            continue
        if _count_on_day(day_periods, candidate.id) >= max_same_subject_per_day:
            continue
        return candidate
    return pool[0]


def generate_timetable(
    existing: Sequence[GridPeriod],
    items: Sequence[PoolItem],
    school_type: Optional[SchoolType],
    rng: Optional[random.Random] = None,
    max_same_subject_per_day: int = MAX_SAME_SUBJECT_PER_DAY,
    max_free_periods_per_day: int = MAX_FREE_PERIODS_PER_DAY,
) -> List[GridPeriod]:
    """
    Fill the empty lesson slots of a weekly grid.

    `existing` is not modified; the result holds copies plus the new periods,
    sorted by day then start time. TERTIARY grids are filled with course ids,
    all others with subject ids.
    """
    if not items:
        raise BadRequestError("No subjects or courses available")
    rng = rng or random.Random()
    template = get_schedule(school_type)
    tertiary = school_type == SchoolType.TERTIARY

    result = [replace(p) for p in existing]
    lesson_slots = _lesson_slots(result, template)
    weighted = build_weighted_pool(items)

    for day in WEEKDAYS:
        day_periods = [p for p in result if p.day_of_week == day]
        result.extend(_add_non_lesson_periods(day, day_periods, template))

        # Empty lesson slots for the day, with the existing period if there is one
        empty: List[Tuple[time, time, Optional[GridPeriod]]] = []
        for start, end in lesson_slots:
            same = [p for p in day_periods if (p.start_time, p.end_time) == (start, end)]
            if same:
                if same[0].type == PeriodType.LESSON and not same[0].is_filled:
                    empty.append((start, end, same[0]))
                continue
            if any(p.overlaps(start, end) for p in day_periods):
                continue
            empty.append((start, end, None))

        if not empty:
            continue
        free_count = min(rng.randint(1, max_free_periods_per_day), len(empty))
        free = set(rng.sample(range(len(empty)), free_count))

        for index, (start, end, period) in enumerate(empty):
            if period is None:
                period = GridPeriod(day_of_week=day, start_time=start, end_time=end)
                day_periods.append(period)
                result.append(period)
            if index in free:
                period.name = "Free Period"
                continue
            pool = list(weighted)
            rng.shuffle(pool)
            chosen = _pick(pool, day_periods, start, max_same_subject_per_day)
            period.name = chosen.name
            if tertiary:
                period.course_id = chosen.id
            else:
                period.subject_id = chosen.id

    return sort_periods(result)


def insert_break_row(
    periods: Sequence[GridPeriod],
    type: PeriodType,
    start_time: time,
    end_time: time,
) -> List[GridPeriod]:
    """Add one ASSEMBLY/BREAK/LUNCH period at the same time on every weekday."""
    if type not in NON_LESSON_TYPES:
        raise BadRequestError("Row type must be BREAK, LUNCH or ASSEMBLY")
    if not start_time < end_time:
        raise BadRequestError("Start time must be before end time")
    label = type.value.capitalize()
    added = [
        GridPeriod(day_of_week=day, start_time=start_time, end_time=end_time, type=type, name=label)
        for day in WEEKDAYS
    ]
    return sort_periods([replace(p) for p in periods] + added)
