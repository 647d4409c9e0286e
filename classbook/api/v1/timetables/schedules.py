"""Daily schedule templates per school type, used when auto-filling a timetable."""

from dataclasses import dataclass
from datetime import time
from typing import List, Optional

from classbook.core.enums import PeriodType, SchoolType


@dataclass(frozen=True)
class ScheduleSlot:
    start_time: time
    end_time: time
    type: PeriodType
    label: str


def _slot(start: str, end: str, type_: PeriodType, label: str) -> ScheduleSlot:
    return ScheduleSlot(time.fromisoformat(start), time.fromisoformat(end), type_, label)


# 07:30 - 14:10
PRIMARY_SCHEDULE: List[ScheduleSlot] = [
    _slot("07:30", "07:45", PeriodType.ASSEMBLY, "Assembly"),
    _slot("07:45", "08:25", PeriodType.LESSON, "Period 1"),
    _slot("08:25", "09:05", PeriodType.LESSON, "Period 2"),
    _slot("09:05", "09:45", PeriodType.LESSON, "Period 3"),
    _slot("09:45", "10:25", PeriodType.LESSON, "Period 4"),
    _slot("10:25", "11:00", PeriodType.LESSON, "Period 5"),
    _slot("11:00", "11:40", PeriodType.BREAK, "Break"),
    _slot("11:40", "12:20", PeriodType.LESSON, "Period 6"),
    _slot("12:20", "12:30", PeriodType.LESSON, "Period 7"),
    _slot("12:30", "13:00", PeriodType.LUNCH, "Lunch"),
    _slot("13:00", "13:40", PeriodType.LESSON, "Period 8"),
    _slot("13:40", "14:10", PeriodType.LESSON, "Period 9"),
]

# 08:00 - 14:35
SECONDARY_SCHEDULE: List[ScheduleSlot] = [
    _slot("08:00", "08:15", PeriodType.ASSEMBLY, "Assembly"),
    _slot("08:15", "09:00", PeriodType.LESSON, "Period 1"),
    _slot("09:00", "09:45", PeriodType.LESSON, "Period 2"),
    _slot("09:45", "10:30", PeriodType.LESSON, "Period 3"),
    _slot("10:30", "11:00", PeriodType.BREAK, "Break"),
    _slot("11:00", "11:45", PeriodType.LESSON, "Period 4"),
    _slot("11:45", "12:30", PeriodType.LESSON, "Period 5"),
    _slot("12:30", "13:15", PeriodType.LUNCH, "Lunch"),
    _slot("13:15", "14:00", PeriodType.LESSON, "Period 6"),
    _slot("14:00", "14:35", PeriodType.LESSON, "Period 7"),
]

# 07:45 - 16:00
TERTIARY_SCHEDULE: List[ScheduleSlot] = [
    _slot("07:45", "08:00", PeriodType.ASSEMBLY, "Assembly"),
    _slot("08:00", "09:00", PeriodType.LESSON, "Lecture 1"),
    _slot("09:00", "10:00", PeriodType.LESSON, "Lecture 2"),
    _slot("10:00", "10:30", PeriodType.LESSON, "Lecture 3"),
    _slot("10:30", "11:00", PeriodType.BREAK, "Break"),
    _slot("11:00", "12:00", PeriodType.LESSON, "Lecture 4"),
    _slot("12:00", "13:00", PeriodType.LESSON, "Lecture 5"),
    _slot("13:00", "14:00", PeriodType.LUNCH, "Lunch"),
    _slot("14:00", "15:00", PeriodType.LESSON, "Lecture 6"),
    _slot("15:00", "16:00", PeriodType.LESSON, "Lecture 7"),
]


def get_schedule(school_type: Optional[SchoolType]) -> List[ScheduleSlot]:
    """Template for a school type. Unknown or missing types get the secondary day."""
    if school_type == SchoolType.PRIMARY:
        return PRIMARY_SCHEDULE
    if school_type == SchoolType.TERTIARY:
        return TERTIARY_SCHEDULE
    return SECONDARY_SCHEDULE
