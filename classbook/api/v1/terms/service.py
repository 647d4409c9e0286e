from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from classbook.api.v1.classes.resolver import resolve_school
from classbook.core.exceptions import ConflictError, NotFoundError
from classbook.core.models import School, Term

from .schemas import TermCreate, TermResponse


async def get_school_term(db: AsyncSession, school: School, term_id: UUID) -> Term:
    term = await db.get(Term, term_id)
    if not term or term.school_id != school.id:
        raise NotFoundError("Term not found")
    return term


async def create_term(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    payload: TermCreate,
) -> TermResponse:
    school = await resolve_school(db, school_ref)
    name = payload.name.strip()
    existing = await db.execute(
        select(Term.id).where(
            Term.school_id == school.id,
            Term.academic_year == payload.academic_year,
            Term.name == name,
        )
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError(f"{name} already exists for {payload.academic_year}")
    obj = Term(school_id=school.id, name=name, academic_year=payload.academic_year)
    db.add(obj)
    await db.commit()
    await db.refresh(obj)
    return TermResponse.model_validate(obj)


async def list_terms(
    db: AsyncSession,
    school_ref: Union[str, UUID],
    academic_year: Optional[str] = None,
) -> List[TermResponse]:
    school = await resolve_school(db, school_ref)
    stmt = select(Term).where(Term.school_id == school.id)
    if academic_year:
        stmt = stmt.where(Term.academic_year == academic_year)
    result = await db.execute(stmt.order_by(Term.academic_year, Term.created_at))
    return [TermResponse.model_validate(t) for t in result.scalars().all()]
