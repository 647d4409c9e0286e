"""Class and class arm endpoints: listing, update, students and deletion."""

from datetime import date

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.service import current_academic_year
from classbook.core.models import ClassTeacher, Enrollment

from factories import ACADEMIC_YEAR, enroll, make_arm, make_class, make_level, make_school, make_student, make_teacher

BASE = "/api/v1/schools/greenfield/classes"


def test_academic_year_turns_over_in_september() -> None:
    assert current_academic_year(date(2025, 8, 31)) == "2024/2025"
    assert current_academic_year(date(2025, 9, 1)) == "2025/2026"


@pytest.mark.asyncio
async def test_create_class_requires_school_level(client: AsyncClient, db_session: AsyncSession) -> None:
    await make_school(db_session, tertiary=False)

    response = await client.post(
        BASE,
        json={"name": "Data Structures", "type": "TERTIARY", "academic_year": ACADEMIC_YEAR},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "School does not have tertiary level"


@pytest.mark.asyncio
async def test_create_and_get_tertiary_course(client: AsyncClient, db_session: AsyncSession) -> None:
    await make_school(db_session)

    created = await client.post(
        BASE,
        json={
            "name": "Data Structures",
            "code": "CS201",
            "type": "TERTIARY",
            "academic_year": ACADEMIC_YEAR,
            "credit_hours": 3,
        },
    )
    assert created.status_code == 201
    body = created.json()
    assert body["kind"] == "CLASS"
    assert body["code"] == "CS201"

    fetched = await client.get(f"{BASE}/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["name"] == "Data Structures"


@pytest.mark.asyncio
async def test_list_classes_returns_arms_by_level(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    jss2 = await make_level(db_session, school, name="JSS 2", level=2)
    jss1 = await make_level(db_session, school, name="JSS 1", level=1)
    await make_arm(db_session, jss2, name="Gold")
    await make_arm(db_session, jss1, name="Silver")
    await make_arm(db_session, jss1, name="Gold")
    await make_class(db_session, school, name="Data Structures")

    response = await client.get(BASE, params={"academic_year": ACADEMIC_YEAR})

    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["JSS 1 Gold", "JSS 1 Silver", "JSS 2 Gold"]
    assert all(c["kind"] == "CLASS_ARM" for c in response.json())

    courses = await client.get(BASE, params={"academic_year": ACADEMIC_YEAR, "type": "TERTIARY"})
    assert [c["name"] for c in courses.json()] == ["Data Structures"]


@pytest.mark.asyncio
async def test_rename_arm_accepts_display_or_short_name(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    arm = await make_arm(db_session, await make_level(db_session, school, name="JSS 1"))

    full = await client.patch(f"{BASE}/{arm.id}", json={"name": "JSS 1 Diamond"})
    assert full.status_code == 200
    assert full.json()["name"] == "JSS 1 Diamond"

    short = await client.patch(f"{BASE}/{arm.id}", json={"name": "Ruby"})
    assert short.json()["name"] == "JSS 1 Ruby"


@pytest.mark.asyncio
async def test_enroll_and_list_arm_students(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    arm = await make_arm(db_session, await make_level(db_session, school))
    student = await make_student(db_session, school)

    created = await client.post(f"{BASE}/{arm.id}/students", json={"student_id": str(student.id)})
    assert created.status_code == 201
    assert created.json()["enrollment"]["class_level"] == "JSS 1"

    again = await client.post(f"{BASE}/{arm.id}/students", json={"student_id": str(student.id)})
    assert again.status_code == 409

    listed = await client.get(f"{BASE}/{arm.id}/students")
    assert [s["id"] for s in listed.json()] == [str(student.id)]
    assert (await client.get(f"{BASE}/{arm.id}")).json()["students_count"] == 1


@pytest.mark.asyncio
async def test_legacy_class_includes_level_only_enrollments(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    cls = await make_class(db_session, school, name="Primary 4", type_="PRIMARY", class_level="Primary 4")
    linked = await make_student(db_session, school, "Amaka", "Nwosu")
    level_only = await make_student(db_session, school, "Bayo", "Lawal")
    elsewhere = await make_student(db_session, school, "Chika", "Okafor")
    await enroll(db_session, school, linked, class_id=cls.id, class_level="Primary 4")
    await enroll(db_session, school, level_only, class_level="Primary 4")
    await enroll(db_session, school, elsewhere, class_level="Primary 5")

    response = await client.get(f"{BASE}/{cls.id}/students")

    assert response.status_code == 200
    assert [s["last_name"] for s in response.json()] == ["Lawal", "Nwosu"]


@pytest.mark.asyncio
async def test_delete_with_enrollments_needs_force(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    arm = await make_arm(db_session, await make_level(db_session, school, name="JSS 1"), name="Gold")
    enrollment = await enroll(db_session, school, await make_student(db_session, school), class_arm_id=arm.id)

    response = await client.delete(f"{BASE}/{arm.id}")

    assert response.status_code == 400
    assert response.json()["detail"] == (
        'Cannot delete ClassArm "JSS 1 Gold" because it has 1 active student enrollment(s). '
        "Please transfer or remove students first, or use force delete."
    )
    await db_session.refresh(enrollment)
    assert enrollment.is_active is True


@pytest.mark.asyncio
async def test_force_delete_closes_enrollments(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    arm = await make_arm(db_session, await make_level(db_session, school, name="JSS 1"), name="Gold")
    teacher = await make_teacher(db_session, school)
    enrollment = await enroll(db_session, school, await make_student(db_session, school), class_arm_id=arm.id)
    await client.post(f"{BASE}/{arm.id}/teachers", json={"teacher_id": str(teacher.id), "subject": "English"})

    response = await client.delete(f"{BASE}/{arm.id}", params={"force": "true"})

    assert response.status_code == 200
    assert response.json() == {"message": "JSS 1 Gold deleted", "closed_enrollments": 1}
    await db_session.refresh(enrollment)
    assert enrollment.is_active is False
    assert enrollment.end_date is not None
    remaining = await db_session.execute(select(ClassTeacher.id).where(ClassTeacher.class_arm_id == arm.id))
    assert remaining.first() is None
    assert (await client.get(f"{BASE}/{arm.id}")).status_code == 404


@pytest.mark.asyncio
async def test_delete_empty_legacy_class(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    cls = await make_class(db_session, school, name="Data Structures")
    student = await make_student(db_session, school)
    closed = await enroll(db_session, school, student, class_id=cls.id)
    closed.is_active = False
    await db_session.commit()

    response = await client.delete(f"{BASE}/{cls.id}")

    assert response.status_code == 200
    assert response.json() == {"message": "Data Structures deleted", "closed_enrollments": 0}
    kept = await db_session.execute(select(Enrollment.id).where(Enrollment.id == closed.id))
    assert kept.scalar_one() == closed.id
