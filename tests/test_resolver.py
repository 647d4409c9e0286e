"""Class target resolution: arms vs legacy classes, tenant ownership, idempotency."""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import resolve_class_target, resolve_school
from classbook.core.enums import SchoolType, TargetKind
from classbook.core.exceptions import NotFoundError

from factories import make_arm, make_class, make_level, make_school


@pytest.mark.asyncio
async def test_resolve_school_by_id_or_subdomain(db_session: AsyncSession) -> None:
    school = await make_school(db_session, subdomain="greenfield")

    by_id = await resolve_school(db_session, str(school.id))
    by_subdomain = await resolve_school(db_session, "GreenField")

    assert by_id.id == school.id
    assert by_subdomain.id == school.id


@pytest.mark.asyncio
async def test_unknown_school_is_not_found(db_session: AsyncSession) -> None:
    with pytest.raises(NotFoundError) as exc:
        await resolve_school(db_session, "nowhere")
    assert exc.value.message == "School not found"
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_arm_resolves_to_class_arm_target(db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    level = await make_level(db_session, school, name="JSS 1")
    arm = await make_arm(db_session, level, name="Gold")

    target = await resolve_class_target(db_session, school, str(arm.id))

    assert target.kind == TargetKind.CLASS_ARM
    assert target.id == arm.id
    assert target.display_name == "JSS 1 Gold"
    assert target.type == SchoolType.SECONDARY
    assert target.class_level_id == level.id
    assert target.link() == {"class_arm_id": arm.id, "class_id": None}


@pytest.mark.asyncio
async def test_legacy_class_resolves_to_class_target(db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    cls = await make_class(db_session, school, name="Data Structures")

    target = await resolve_class_target(db_session, school, cls.id)

    assert target.kind == TargetKind.CLASS
    assert target.display_name == "Data Structures"
    assert target.type == SchoolType.TERTIARY
    assert target.link() == {"class_id": cls.id, "class_arm_id": None}


@pytest.mark.asyncio
async def test_resolution_is_idempotent(db_session: AsyncSession) -> None:
    school = await make_school(db_session)
    level = await make_level(db_session, school)
    arm = await make_arm(db_session, level)

    first = await resolve_class_target(db_session, school, arm.id)
    second = await resolve_class_target(db_session, school, arm.id)

    assert (first.kind, first.id) == (second.kind, second.id)
    assert first == second


@pytest.mark.asyncio
async def test_arm_of_another_school_is_not_found(db_session: AsyncSession) -> None:
    school = await make_school(db_session, subdomain="greenfield")
    other = await make_school(db_session, subdomain="riverside")
    level = await make_level(db_session, other)
    arm = await make_arm(db_session, level)

    with pytest.raises(NotFoundError) as exc:
        await resolve_class_target(db_session, school, arm.id)
    assert exc.value.message == "Class or ClassArm not found"


@pytest.mark.asyncio
async def test_class_of_another_school_is_not_found(db_session: AsyncSession) -> None:
    school = await make_school(db_session, subdomain="greenfield")
    other = await make_school(db_session, subdomain="riverside")
    cls = await make_class(db_session, other)

    with pytest.raises(NotFoundError):
        await resolve_class_target(db_session, school, cls.id)


@pytest.mark.parametrize("class_ref", ["not-a-uuid", str(uuid.uuid4())])
@pytest.mark.asyncio
async def test_bad_class_reference_is_not_found(db_session: AsyncSession, class_ref: str) -> None:
    school = await make_school(db_session)
    with pytest.raises(NotFoundError):
        await resolve_class_target(db_session, school, class_ref)
