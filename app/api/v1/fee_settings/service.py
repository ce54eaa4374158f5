"""Fee schedule lookup and administration. One active amount per (level, academic year, term)."""

from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError, NotFoundError
from app.core.models import FeeSetting

from .schemas import FeeSettingCreate, FeeSettingResponse, FeeSettingUpdate


def _to_response(fs: FeeSetting) -> FeeSettingResponse:
    return FeeSettingResponse.model_validate(fs)


def normalize_level(level: str) -> str:
    """Levels are stored and matched upper-case: " o_level " and "O_LEVEL" are the same level."""
    return (level or "").strip().upper()


async def find_active_fee_setting(
    db: AsyncSession,
    level: str,
    academic_year: str,
    term: str,
) -> Optional[FeeSetting]:
    result = await db.execute(
        select(FeeSetting).where(
            FeeSetting.level == normalize_level(level),
            FeeSetting.academic_year == academic_year.strip(),
            FeeSetting.term == term.strip(),
            FeeSetting.active.is_(True),
        )
    )
    return result.scalar_one_or_none()


async def resolve_amount_owed(
    db: AsyncSession,
    level: str,
    academic_year: str,
    term: str,
) -> Decimal:
    """Amount owed for a level/year/term. Raises NotFoundError when no active schedule exists."""
    fs = await find_active_fee_setting(db, level, academic_year, term)
    if fs is None:
        raise NotFoundError(
            f"No active fee setting for level {level}, academic year {academic_year}, {term}"
        )
    return fs.amount


async def _ensure_single_active(
    db: AsyncSession,
    level: str,
    academic_year: str,
    term: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    existing = await find_active_fee_setting(db, level, academic_year, term)
    if existing is not None and existing.id != exclude_id:
        raise ConflictError(
            "An active fee setting already exists for this level, academic year and term"
        )


async def list_fee_settings(db: AsyncSession, active_only: bool = False) -> List[FeeSettingResponse]:
    stmt = select(FeeSetting)
    if active_only:
        stmt = stmt.where(FeeSetting.active.is_(True))
    stmt = stmt.order_by(FeeSetting.academic_year, FeeSetting.term, FeeSetting.level)
    result = await db.execute(stmt)
    return [_to_response(fs) for fs in result.scalars().all()]


async def get_fee_setting(db: AsyncSession, fee_setting_id: UUID) -> FeeSettingResponse:
    fs = await db.get(FeeSetting, fee_setting_id)
    if not fs:
        raise NotFoundError("Fee setting not found")
    return _to_response(fs)


async def get_fee_setting_by_level(
    db: AsyncSession,
    level: str,
    academic_year: str,
    term: str,
) -> FeeSettingResponse:
    fs = await find_active_fee_setting(db, level, academic_year, term)
    if fs is None:
        raise NotFoundError("Fee setting not found for the specified level")
    return _to_response(fs)


async def create_fee_setting(db: AsyncSession, payload: FeeSettingCreate) -> FeeSettingResponse:
    level = normalize_level(payload.level)
    academic_year = payload.academic_year.strip()
    term = payload.term.strip()
    if payload.active:
        await _ensure_single_active(db, level, academic_year, term)
    fs = FeeSetting(
        level=level,
        amount=payload.amount,
        academic_year=academic_year,
        term=term,
        active=payload.active,
    )
    db.add(fs)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError(
            "An active fee setting already exists for this level, academic year and term"
        )
    await db.refresh(fs)
    return _to_response(fs)


async def update_fee_setting(
    db: AsyncSession,
    fee_setting_id: UUID,
    payload: FeeSettingUpdate,
) -> FeeSettingResponse:
    fs = await db.get(FeeSetting, fee_setting_id)
    if not fs:
        raise NotFoundError("Fee setting not found")
    academic_year = payload.academic_year.strip() if payload.academic_year is not None else fs.academic_year
    term = payload.term.strip() if payload.term is not None else fs.term
    active = payload.active if payload.active is not None else fs.active
    if active:
        await _ensure_single_active(db, fs.level, academic_year, term, exclude_id=fs.id)
    if payload.amount is not None:
        fs.amount = payload.amount
    fs.academic_year = academic_year
    fs.term = term
    fs.active = active
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Fee setting update conflict")
    await db.refresh(fs)
    return _to_response(fs)


async def delete_fee_setting(db: AsyncSession, fee_setting_id: UUID) -> None:
    fs = await db.get(FeeSetting, fee_setting_id)
    if not fs:
        raise NotFoundError("Fee setting not found")
    await db.delete(fs)
    await db.commit()
