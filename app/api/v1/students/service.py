"""Student lookups consumed by the fee ledger. Student CRUD lives in the enrollment module."""

from typing import List
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFoundError
from app.core.models import Student

from .schemas import StudentSummary

SEARCH_LIMIT = 10


async def find_student_by_id(db: AsyncSession, student_id: UUID) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    return student


async def search_students(db: AsyncSession, query: str) -> List[StudentSummary]:
    """Case-insensitive match on first name, last name or student number. At most 10 results."""
    q = (query or "").strip().lower()
    if not q:
        return []
    pattern = f"%{q}%"
    stmt = (
        select(Student)
        .where(
            or_(
                func.lower(Student.first_name).like(pattern),
                func.lower(Student.last_name).like(pattern),
                func.lower(Student.student_number).like(pattern),
            )
        )
        .order_by(Student.last_name, Student.first_name)
        .limit(SEARCH_LIMIT)
    )
    result = await db.execute(stmt)
    return [StudentSummary.model_validate(s) for s in result.scalars().all()]


async def find_students_by_name(db: AsyncSession, name: str) -> List[Student]:
    """Students whose full name contains name, ignoring case."""
    full_name = func.lower(Student.first_name + " " + Student.last_name)
    result = await db.execute(
        select(Student).where(full_name.contains(name.strip().lower())).order_by(Student.last_name)
    )
    return list(result.scalars().all())
