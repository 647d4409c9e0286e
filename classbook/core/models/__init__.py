from classbook.core.models.school import School
from classbook.core.models.class_level import ClassLevel
from classbook.core.models.class_arm import ClassArm
from classbook.core.models.class_model import SchoolClass
from classbook.core.models.teacher import Teacher
from classbook.core.models.class_teacher import ClassTeacher
from classbook.core.models.student import Student
from classbook.core.models.enrollment import Enrollment
from classbook.core.models.subject import Subject
from classbook.core.models.term import Term
from classbook.core.models.timetable_period import TimetablePeriod

__all__ = [
    "ClassArm",
    "ClassLevel",
    "ClassTeacher",
    "Enrollment",
    "School",
    "SchoolClass",
    "Student",
    "Subject",
    "Teacher",
    "Term",
    "TimetablePeriod",
]
