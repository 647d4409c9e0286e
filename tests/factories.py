"""Builders for the records most tests need. Each one commits."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from classbook.core.models import (
    ClassArm,
    ClassLevel,
    Enrollment,
    School,
    SchoolClass,
    Student,
    Subject,
    Teacher,
    Term,
)

ACADEMIC_YEAR = "2024/2025"


async def make_school(
    db: AsyncSession,
    subdomain: str = "greenfield",
    primary: bool = True,
    secondary: bool = True,
    tertiary: bool = True,
) -> School:
    school = School(
        name=f"{subdomain.title()} School",
        subdomain=subdomain,
        has_primary=primary,
        has_secondary=secondary,
        has_tertiary=tertiary,
    )
    db.add(school)
    await db.commit()
    return school


async def make_level(
    db: AsyncSession,
    school: School,
    name: str = "JSS 1",
    type_: str = "SECONDARY",
    level: int = 1,
) -> ClassLevel:
    class_level = ClassLevel(school_id=school.id, name=name, type=type_, level=level)
    db.add(class_level)
    await db.commit()
    return class_level


async def make_arm(db: AsyncSession, class_level: ClassLevel, name: str = "Gold") -> ClassArm:
    arm = ClassArm(class_level_id=class_level.id, name=name, academic_year=ACADEMIC_YEAR, is_active=True)
    db.add(arm)
    await db.commit()
    return arm


async def make_class(
    db: AsyncSession,
    school: School,
    name: str = "Introduction to Computing",
    type_: str = "TERTIARY",
    class_level: Optional[str] = None,
) -> SchoolClass:
    cls = SchoolClass(
        school_id=school.id,
        name=name,
        class_level=class_level,
        type=type_,
        academic_year=ACADEMIC_YEAR,
        is_active=True,
    )
    db.add(cls)
    await db.commit()
    return cls


async def make_teacher(
    db: AsyncSession,
    school: School,
    first_name: str = "Ada",
    last_name: str = "Obi",
    subject: Optional[str] = None,
    email: Optional[str] = "teacher@example.com",
) -> Teacher:
    teacher = Teacher(
        school_id=school.id,
        first_name=first_name,
        last_name=last_name,
        email=email,
        subject=subject,
        is_active=True,
    )
    db.add(teacher)
    await db.commit()
    return teacher


async def make_student(db: AsyncSession, school: School, first_name: str = "Chidi", last_name: str = "Eze") -> Student:
    student = Student(school_id=school.id, first_name=first_name, last_name=last_name)
    db.add(student)
    await db.commit()
    return student


async def enroll(db: AsyncSession, school: School, student: Student, **link) -> Enrollment:
    enrollment = Enrollment(
        school_id=school.id,
        student_id=student.id,
        academic_year=ACADEMIC_YEAR,
        is_active=True,
        **link,
    )
    db.add(enrollment)
    await db.commit()
    return enrollment


async def make_subject(db: AsyncSession, school: School, name: str, school_type: Optional[str] = "SECONDARY") -> Subject:
    subject = Subject(school_id=school.id, name=name, school_type=school_type, is_active=True)
    db.add(subject)
    await db.commit()
    return subject


async def make_term(db: AsyncSession, school: School, name: str = "First Term") -> Term:
    term = Term(school_id=school.id, name=name, academic_year=ACADEMIC_YEAR)
    db.add(term)
    await db.commit()
    return term
