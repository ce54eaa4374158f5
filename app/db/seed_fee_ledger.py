"""
Seed script for a fresh fee ledger database.

This script:
1. Creates all tables that do not exist yet
2. Inserts the active fee settings listed in FEE_SETTINGS (skipped when one is already active)
3. Inserts the demo students listed in DEMO_STUDENTS (skipped when the student number exists)
"""
import asyncio
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.fee_settings.service import find_active_fee_setting
from app.core.models import FeeSetting, Student
from app.db.session import AsyncSessionLocal, create_all, engine


# (level, academic_year, term, amount)
FEE_SETTINGS: List[Tuple[str, str, str, Decimal]] = [
    ("O_LEVEL", "2025", "Term 1", Decimal("100.00")),
    ("O_LEVEL", "2025", "Term 2", Decimal("100.00")),
    ("O_LEVEL", "2025", "Term 3", Decimal("100.00")),
    ("A_LEVEL", "2025", "Term 1", Decimal("150.00")),
    ("A_LEVEL", "2025", "Term 2", Decimal("150.00")),
    ("A_LEVEL", "2025", "Term 3", Decimal("150.00")),
]

# (student_number, first_name, last_name, form, section, level)
DEMO_STUDENTS: List[Tuple[str, str, str, str, str, str]] = [
    ("STU-0001", "Benny", "Bosha", "Form 5", "B", "O_LEVEL"),
    ("STU-0002", "Rudo", "Moyo", "Form 5", "B", "O_LEVEL"),
    ("STU-0003", "Tendai", "Ncube", "Form 6", "A", "A_LEVEL"),
]


async def seed_fee_ledger(db: AsyncSession) -> None:
    settings_created = 0
    for level, academic_year, term, amount in FEE_SETTINGS:
        if await find_active_fee_setting(db, level, academic_year, term):
            continue
        db.add(FeeSetting(level=level, academic_year=academic_year, term=term, amount=amount, active=True))
        settings_created += 1

    students_created = 0
    for student_number, first_name, last_name, form, section, level in DEMO_STUDENTS:
        existing = await db.execute(select(Student).where(Student.student_number == student_number))
        if existing.scalar_one_or_none():
            continue
        db.add(
            Student(
                student_number=student_number,
                first_name=first_name,
                last_name=last_name,
                form=form,
                section=section,
                level=level,
            )
        )
        students_created += 1

    await db.commit()

    print("=" * 60)
    print("Fee Ledger Seeding Summary")
    print("=" * 60)
    print(f"Fee settings created: {settings_created}")
    print(f"Students created: {students_created}")
    print("=" * 60)


async def main() -> None:
    """Main entry point for the seed script."""
    await create_all(engine)
    async with AsyncSessionLocal() as db:
        try:
            await seed_fee_ledger(db)
        except Exception as e:
            print(f"Error seeding fee ledger: {e}")
            await db.rollback()
            raise


if __name__ == "__main__":
    asyncio.run(main())
