import logging
from typing import Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import resolve_school
from classbook.core.exceptions import BadRequestError, ConflictError
from classbook.core.models import School

from .schemas import SchoolCreate, SchoolResponse

logger = logging.getLogger(__name__)


async def create_school(db: AsyncSession, payload: SchoolCreate) -> SchoolResponse:
    if not (payload.has_primary or payload.has_secondary or payload.has_tertiary):
        raise BadRequestError("School must offer at least one of primary, secondary or tertiary level")
    subdomain = payload.subdomain.lower()
    existing = await db.execute(select(School.id).where(School.subdomain == subdomain))
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"Subdomain '{subdomain}' is already taken")
    try:
        obj = School(
            name=payload.name.strip(),
            subdomain=subdomain,
            has_primary=payload.has_primary,
            has_secondary=payload.has_secondary,
            has_tertiary=payload.has_tertiary,
        )
        db.add(obj)
        await db.commit()
        await db.refresh(obj)
    except IntegrityError:
        await db.rollback()
        raise ConflictError(f"Subdomain '{subdomain}' is already taken")
    logger.info("Created school %s (%s)", obj.subdomain, obj.id)
    return SchoolResponse.model_validate(obj)


async def get_school(db: AsyncSession, school_ref: Union[str, UUID]) -> SchoolResponse:
    return SchoolResponse.model_validate(await resolve_school(db, school_ref))
