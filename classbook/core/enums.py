from enum import Enum


class SchoolType(str, Enum):
    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    TERTIARY = "TERTIARY"


class TargetKind(str, Enum):
    CLASS_ARM = "CLASS_ARM"
    CLASS = "CLASS"


class PeriodType(str, Enum):
    LESSON = "LESSON"
    BREAK = "BREAK"
    LUNCH = "LUNCH"
    ASSEMBLY = "ASSEMBLY"


class DayOfWeek(str, Enum):
    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"
    SATURDAY = "SATURDAY"
    SUNDAY = "SUNDAY"


WEEKDAYS = [
    DayOfWeek.MONDAY,
    DayOfWeek.TUESDAY,
    DayOfWeek.WEDNESDAY,
    DayOfWeek.THURSDAY,
    DayOfWeek.FRIDAY,
]


class WorkloadBand(str, Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    OVERLOADED = "OVERLOADED"


class NotificationKind(str, Enum):
    ASSIGNED = "ASSIGNED"
    REMOVED = "REMOVED"
