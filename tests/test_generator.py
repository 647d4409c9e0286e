"""Timetable auto-fill and row insertion on in-memory grids."""

import random
import uuid
from collections import Counter
from datetime import time

import pytest

from classbook.api.v1.timetables.generator import (
    GridPeriod,
    PoolItem,
    build_weighted_pool,
    generate_timetable,
    insert_break_row,
    is_core_subject,
)
from classbook.api.v1.timetables.schedules import SECONDARY_SCHEDULE, get_schedule
from classbook.core.enums import WEEKDAYS, DayOfWeek, PeriodType, SchoolType
from classbook.core.exceptions import BadRequestError

SUBJECTS = [
    PoolItem(uuid.uuid4(), "Mathematics"),
    PoolItem(uuid.uuid4(), "English Language"),
    PoolItem(uuid.uuid4(), "Civic Education"),
    PoolItem(uuid.uuid4(), "Fine Art"),
]


def _lessons(periods, day):
    return [p for p in periods if p.day_of_week == day and p.type == PeriodType.LESSON]


def test_core_subjects_weigh_more() -> None:
    maths, music = PoolItem(uuid.uuid4(), "Further Mathematics"), PoolItem(uuid.uuid4(), "Music")

    pool = build_weighted_pool([maths, music])

    assert is_core_subject("Basic Science and Technology")
    assert not is_core_subject("Music")
    assert Counter(item.name for item in pool) == {"Further Mathematics": 3, "Music": 2}


def test_unknown_school_type_uses_secondary_day() -> None:
    assert get_schedule(None) is SECONDARY_SCHEDULE


def test_empty_grid_gets_one_of_each_non_lesson_period_per_weekday() -> None:
    result = generate_timetable([], SUBJECTS, SchoolType.SECONDARY, rng=random.Random(7))

    for day in WEEKDAYS:
        types = Counter(p.type for p in result if p.day_of_week == day)
        assert types[PeriodType.ASSEMBLY] == 1
        assert types[PeriodType.BREAK] == 1
        assert types[PeriodType.LUNCH] == 1
        assert types[PeriodType.LESSON] == 7


def test_each_weekday_keeps_one_or_two_free_periods() -> None:
    for seed in range(20):
        result = generate_timetable([], SUBJECTS, SchoolType.SECONDARY, rng=random.Random(seed))
        for day in WEEKDAYS:
            free = [p for p in _lessons(result, day) if not p.is_filled]
            assert 1 <= len(free) <= 2
            assert all(p.name == "Free Period" for p in free)


def test_subjects_spread_across_the_day() -> None:
    for seed in range(20):
        result = generate_timetable([], SUBJECTS, SchoolType.SECONDARY, rng=random.Random(seed))
        for day in WEEKDAYS:
            filled = [p for p in _lessons(result, day) if p.is_filled]
            counts = Counter(p.subject_id for p in filled)
            assert max(counts.values()) <= 2
            assert all(a.subject_id != b.subject_id for a, b in zip(filled, filled[1:]))


def test_filled_slots_and_weekends_are_left_alone() -> None:
    maths = SUBJECTS[0]
    existing = [
        GridPeriod(DayOfWeek.MONDAY, time(8, 15), time(9, 0), subject_id=maths.id, teacher_id=uuid.uuid4()),
        GridPeriod(DayOfWeek.SATURDAY, time(9, 0), time(10, 0)),
    ]
    snapshot = [(p.subject_id, p.teacher_id, p.name) for p in existing]

    result = generate_timetable(existing, SUBJECTS, SchoolType.SECONDARY, rng=random.Random(1))

    monday_first = [p for p in result if p.day_of_week == DayOfWeek.MONDAY and p.start_time == time(8, 15)]
    assert len(monday_first) == 1
    assert monday_first[0].subject_id == maths.id
    assert monday_first[0].teacher_id == existing[0].teacher_id
    saturday = [p for p in result if p.day_of_week == DayOfWeek.SATURDAY]
    assert len(saturday) == 1 and not saturday[0].is_filled
    assert [(p.subject_id, p.teacher_id, p.name) for p in existing] == snapshot


def test_existing_lesson_slots_replace_the_template() -> None:
    existing = [GridPeriod(DayOfWeek.MONDAY, time(9, 0), time(10, 0))]

    result = generate_timetable(existing, SUBJECTS, SchoolType.SECONDARY, rng=random.Random(3))

    for day in WEEKDAYS:
        lessons = _lessons(result, day)
        assert [(p.start_time, p.end_time) for p in lessons] == [(time(9, 0), time(10, 0))]


def test_empty_lesson_at_template_time_becomes_the_break() -> None:
    existing = [GridPeriod(DayOfWeek.TUESDAY, time(10, 30), time(11, 0))]

    result = generate_timetable(existing, SUBJECTS, SchoolType.SECONDARY, rng=random.Random(5))

    tuesday = [p for p in result if p.day_of_week == DayOfWeek.TUESDAY and p.start_time == time(10, 30)]
    assert [p.type for p in tuesday] == [PeriodType.BREAK]


def test_tertiary_grid_is_filled_with_courses() -> None:
    courses = [PoolItem(uuid.uuid4(), "Operating Systems"), PoolItem(uuid.uuid4(), "Compilers")]

    result = generate_timetable([], courses, SchoolType.TERTIARY, rng=random.Random(11))

    filled = [p for p in result if p.is_filled]
    assert filled
    assert all(p.course_id is not None and p.subject_id is None for p in filled)
    assembly = [p for p in result if p.type == PeriodType.ASSEMBLY]
    assert {(p.start_time, p.end_time) for p in assembly} == {(time(7, 45), time(8, 0))}


def test_generation_needs_subjects() -> None:
    with pytest.raises(BadRequestError) as exc:
        generate_timetable([], [], SchoolType.PRIMARY)
    assert exc.value.message == "No subjects or courses available"


def test_insert_break_row_adds_a_period_to_each_weekday() -> None:
    existing = [GridPeriod(DayOfWeek.MONDAY, time(8, 0), time(8, 40))]

    result = insert_break_row(existing, PeriodType.BREAK, time(10, 0), time(10, 20))

    breaks = [p for p in result if p.type == PeriodType.BREAK]
    assert [p.day_of_week for p in breaks] == WEEKDAYS
    assert all(p.name == "Break" for p in breaks)
    assert len(result) == 6
    assert len(existing) == 1


@pytest.mark.parametrize(
    "type_, start, end, message",
    [
        (PeriodType.LESSON, time(10, 0), time(10, 20), "Row type must be BREAK, LUNCH or ASSEMBLY"),
        (PeriodType.LUNCH, time(12, 0), time(12, 0), "Start time must be before end time"),
        (PeriodType.ASSEMBLY, time(9, 0), time(8, 0), "Start time must be before end time"),
    ],
)
def test_insert_break_row_rejects_bad_rows(type_, start, end, message) -> None:
    with pytest.raises(BadRequestError) as exc:
        insert_break_row([], type_, start, end)
    assert exc.value.message == message
