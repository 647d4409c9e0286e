"""Timetable endpoints: bulk save, clash checks, preview and break rows."""

import uuid
from collections import Counter

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from factories import make_arm, make_level, make_school, make_subject, make_teacher, make_term

BASE = "/api/v1/schools/greenfield/timetables"


async def _setup(db: AsyncSession):
    school = await make_school(db)
    term = await make_term(db, school)
    level = await make_level(db, school, name="JSS 1")
    gold = await make_arm(db, level, name="Gold")
    blue = await make_arm(db, level, name="Blue")
    maths = await make_subject(db, school, "Mathematics")
    teacher = await make_teacher(db, school, "Ada", "Obi", subject="Mathematics")
    return school, term, gold, blue, maths, teacher


def _lesson(day: str, start: str, end: str, subject=None, teacher=None) -> dict:
    period = {"day_of_week": day, "start_time": start, "end_time": end, "type": "LESSON"}
    if subject is not None:
        period["subject_id"] = str(subject.id)
    if teacher is not None:
        period["teacher_id"] = str(teacher.id)
    return period


@pytest.mark.asyncio
async def test_bulk_save_replaces_the_grid(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, _, maths, teacher = await _setup(db_session)
    payload = {
        "term_id": str(term.id),
        "class_id": str(gold.id),
        "periods": [
            _lesson("TUESDAY", "08:15:00", "09:00:00"),
            _lesson("MONDAY", "08:15:00", "09:00:00", maths, teacher),
            {"day_of_week": "MONDAY", "start_time": "10:30:00", "end_time": "11:00:00", "type": "BREAK"},
        ],
    }

    first = await client.put(BASE, json=payload)
    second = await client.put(BASE, json=payload)

    assert first.status_code == 200
    assert second.status_code == 200
    body = second.json()
    assert [(p["day_of_week"], p["start_time"], p["type"]) for p in body] == [
        ("MONDAY", "08:15:00", "LESSON"),
        ("MONDAY", "10:30:00", "BREAK"),
        ("TUESDAY", "08:15:00", "LESSON"),
    ]
    assert body[0]["subject_name"] == "Mathematics"
    assert body[0]["teacher_name"] == "Ada Obi"
    assert all(p["id"] for p in body)

    listed = await client.get(BASE, params={"term_id": str(term.id), "class_id": str(gold.id)})
    assert [p["id"] for p in listed.json()] == [p["id"] for p in body]


@pytest.mark.asyncio
async def test_overlapping_periods_conflict(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, *_ = await _setup(db_session)

    response = await client.put(
        BASE,
        json={
            "term_id": str(term.id),
            "class_id": str(gold.id),
            "periods": [
                _lesson("MONDAY", "08:15:00", "09:00:00"),
                _lesson("MONDAY", "08:30:00", "09:15:00"),
            ],
        },
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "Periods overlap on MONDAY: 08:15-09:00 and 08:30-09:15"


@pytest.mark.asyncio
async def test_teacher_cannot_teach_two_classes_at_once(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, blue, maths, teacher = await _setup(db_session)
    booked = await client.put(
        BASE,
        json={
            "term_id": str(term.id),
            "class_id": str(blue.id),
            "periods": [_lesson("MONDAY", "08:15:00", "09:00:00", maths, teacher)],
        },
    )
    assert booked.status_code == 200

    response = await client.put(
        BASE,
        json={
            "term_id": str(term.id),
            "class_id": str(gold.id),
            "periods": [_lesson("MONDAY", "08:30:00", "09:10:00", maths, teacher)],
        },
    )

    assert response.status_code == 409
    assert response.json()["detail"] == "Ada Obi is already teaching JSS 1 Blue at 08:15-09:00 on MONDAY"


@pytest.mark.asyncio
async def test_save_rejects_unknown_subject(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, *_ = await _setup(db_session)
    period = _lesson("MONDAY", "08:15:00", "09:00:00")
    period["subject_id"] = str(uuid.uuid4())

    response = await client.put(BASE, json={"term_id": str(term.id), "class_id": str(gold.id), "periods": [period]})

    assert response.status_code == 404
    assert response.json()["detail"] == "Subject not found"


@pytest.mark.asyncio
async def test_break_rows_cannot_carry_a_teacher(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, _, _, teacher = await _setup(db_session)
    period = {
        "day_of_week": "MONDAY",
        "start_time": "10:30:00",
        "end_time": "11:00:00",
        "type": "BREAK",
        "teacher_id": str(teacher.id),
    }

    response = await client.put(BASE, json={"term_id": str(term.id), "class_id": str(gold.id), "periods": [period]})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_auto_generate_is_a_preview(client: AsyncClient, db_session: AsyncSession) -> None:
    school, term, gold, *_ = await _setup(db_session)
    for name in ("English Language", "Basic Science", "Social Studies"):
        await make_subject(db_session, school, name)
    await make_subject(db_session, school, "Accounting", school_type="TERTIARY")

    response = await client.post(
        f"{BASE}/auto-generate",
        json={"term_id": str(term.id), "class_id": str(gold.id), "seed": 42},
    )

    assert response.status_code == 200
    body = response.json()
    assert all(p["id"] is None for p in body)
    assemblies = Counter(p["day_of_week"] for p in body if p["type"] == "ASSEMBLY")
    assert assemblies == {day: 1 for day in ("MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY")}
    names = {p["subject_name"] for p in body if p["subject_id"]}
    assert names <= {"Mathematics", "English Language", "Basic Science", "Social Studies"}

    listed = await client.get(BASE, params={"term_id": str(term.id), "class_id": str(gold.id)})
    assert listed.json() == []


@pytest.mark.asyncio
async def test_auto_generate_without_subjects(client: AsyncClient, db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    term = await make_term(db_session, school)
    arm = await make_arm(db_session, await make_level(db_session, school, name="Primary 2", type_="PRIMARY"))

    response = await client.post(f"{BASE}/auto-generate", json={"term_id": str(term.id), "class_id": str(arm.id)})

    assert response.status_code == 400
    assert response.json()["detail"] == "No subjects or courses available"


@pytest.mark.asyncio
async def test_insert_break_row(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, *_ = await _setup(db_session)
    row = {
        "term_id": str(term.id),
        "class_id": str(gold.id),
        "type": "BREAK",
        "start_time": "10:30:00",
        "end_time": "11:00:00",
    }

    created = await client.post(f"{BASE}/rows", json=row)

    assert created.status_code == 201
    body = created.json()
    assert len(body) == 5
    assert {p["type"] for p in body} == {"BREAK"}

    again = await client.post(f"{BASE}/rows", json={**row, "start_time": "10:45:00", "end_time": "11:15:00"})
    assert again.status_code == 409


@pytest.mark.asyncio
async def test_insert_row_validation(client: AsyncClient, db_session: AsyncSession) -> None:
    _, term, gold, *_ = await _setup(db_session)
    row = {"term_id": str(term.id), "class_id": str(gold.id)}

    lesson = await client.post(
        f"{BASE}/rows", json={**row, "type": "LESSON", "start_time": "10:00:00", "end_time": "10:30:00"}
    )
    backwards = await client.post(
        f"{BASE}/rows", json={**row, "type": "LUNCH", "start_time": "13:00:00", "end_time": "12:30:00"}
    )

    assert lesson.status_code == 400
    assert lesson.json()["detail"] == "Row type must be BREAK, LUNCH or ASSEMBLY"
    assert backwards.status_code == 400
    assert backwards.json()["detail"] == "Start time must be before end time"


@pytest.mark.asyncio
async def test_preview_names_saved_subjects_outside_the_pool(client: AsyncClient, db_session: AsyncSession) -> None:
    school, term, gold, _, _, teacher = await _setup(db_session)
    phonics = await make_subject(db_session, school, "Phonics", school_type="PRIMARY")
    saved = await client.put(
        BASE,
        json={
            "term_id": str(term.id),
            "class_id": str(gold.id),
            "periods": [_lesson("MONDAY", "08:15:00", "09:00:00", phonics, teacher)],
        },
    )
    assert saved.status_code == 200

    response = await client.post(
        f"{BASE}/auto-generate",
        json={"term_id": str(term.id), "class_id": str(gold.id), "seed": 1},
    )

    assert response.status_code == 200
    monday = [p for p in response.json() if p["day_of_week"] == "MONDAY" and p["start_time"] == "08:15:00"]
    assert len(monday) == 1
    assert monday[0]["subject_name"] == "Phonics"
    assert monday[0]["teacher_name"] == "Ada Obi"
