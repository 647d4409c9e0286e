from typing import Union
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import resolve_school
from classbook.core.models import Student

from .schemas import StudentCreate, StudentResponse


async def create_student(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: StudentCreate,
) -> StudentResponse:
    """Create a student record. Enrollment into a class is a separate step."""
    school = await resolve_school(db, school_ref)
    obj = Student(
        school_id=school.id,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        email=str(payload.email).lower() if payload.email else None,
    )
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return StudentResponse.model_validate(obj)
