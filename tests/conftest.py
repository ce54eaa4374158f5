import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.api.v1.fee_payments.schemas import PaymentCreate
from app.core.models import FeeSetting, Student
from app.db.session import build_engine, create_all, get_db
from app.main import app


TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest.fixture()
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """One in-memory SQLite database per test, shared by every session through StaticPool."""
    engine = build_engine(TEST_DATABASE_URL)
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Provide a database session for a test and override FastAPI dependency."""
    async_session = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.clear()


@pytest.fixture()
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def _add_student(
    db: AsyncSession,
    first_name: str,
    last_name: str,
    form: str = "Form 5",
    section: str = "B",
    level: str = "O_LEVEL",
) -> Student:
    student = Student(
        student_number=f"STU-{first_name[:3].upper()}{last_name[:3].upper()}",
        first_name=first_name,
        last_name=last_name,
        form=form,
        section=section,
        level=level,
    )
    db.add(student)
    await db.commit()
    await db.refresh(student)
    return student


def _payment_for(
    student: Student,
    amount: str,
    month: str = "July",
    term: str = "Term 2",
    academic_year: str = "2025",
    payment_date: date = date(2025, 7, 15),
) -> PaymentCreate:
    return PaymentCreate(
        student_id=student.id,
        term=term,
        month=month,
        academic_year=academic_year,
        amount_paid=Decimal(amount),
        payment_date=payment_date,
    )


@pytest.fixture()
async def fee_setting(db_session: AsyncSession) -> FeeSetting:
    fs = FeeSetting(level="O_LEVEL", academic_year="2025", term="Term 2", amount=Decimal("100.00"), active=True)
    db_session.add(fs)
    await db_session.commit()
    await db_session.refresh(fs)
    return fs


@pytest.fixture()
async def benny(db_session: AsyncSession) -> Student:
    return await _add_student(db_session, "Benny", "Bosha")


@pytest.fixture()
def make_student(db_session: AsyncSession):
    """Factory: await make_student("Rudo", "Moyo", form="Form 6", section="A")."""

    async def _make(first_name: str, last_name: str, **kwargs) -> Student:
        return await _add_student(db_session, first_name, last_name, **kwargs)

    return _make


@pytest.fixture()
def payment_for():
    """Factory for PaymentCreate payloads; defaults to Term 2, July, 2025."""
    return _payment_for
