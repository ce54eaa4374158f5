"""Fee payments service: record payments into the ledger, ledger queries, status repair."""

import logging
from datetime import date
from decimal import InvalidOperation
from typing import List, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.fee_settings import service as fee_settings_service
from app.api.v1.students import service as student_service
from app.core.audit import log_fee_audit
from app.core.config import settings
from app.core.enums import AuditAction
from app.core.exceptions import ConflictError, ServiceError, ValidationError
from app.core.models import LedgerEntry, Student
from app.core.payment_status import ZERO, classify, credit_amount, receipt_balance, to_decimal, to_money

from .schemas import (
    LedgerEntryResponse,
    PaymentCreate,
    PaymentReceipt,
    RepairResult,
    StudentRepairResult,
)

logger = logging.getLogger(__name__)

LEDGER_TABLE = "fee_ledger_entries"


def _entry_snapshot(entry: LedgerEntry) -> dict:
    return {
        "amount_owed": str(entry.amount_owed),
        "amount_paid": str(entry.amount_paid),
        "balance": str(entry.balance),
        "status": str(entry.status),
        "payment_date": entry.payment_date.isoformat() if entry.payment_date else None,
    }


def to_entry_response(entry: LedgerEntry) -> LedgerEntryResponse:
    student = entry.student
    return LedgerEntryResponse(
        id=entry.id,
        student_id=entry.student_id,
        student_name=student.full_name if student else None,
        class_name=student.class_label if student else None,
        term=entry.term,
        month=entry.month,
        academic_year=entry.academic_year,
        amount_owed=to_decimal(entry.amount_owed),
        amount_paid=to_decimal(entry.amount_paid),
        balance=to_decimal(entry.balance),
        status=entry.status,
        payment_date=entry.payment_date,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def ledger_entry_for_update(student_id, term: str, month: str, academic_year: str) -> Select:
    """Ledger row for the composite key, row-locked until the surrounding transaction ends."""
    return (
        select(LedgerEntry)
        .where(
            LedgerEntry.student_id == student_id,
            LedgerEntry.term == term,
            LedgerEntry.month == month,
            LedgerEntry.academic_year == academic_year,
        )
        .with_for_update(of=LedgerEntry)
    )


def _apply_classification(entry: LedgerEntry) -> None:
    balance, status = classify(entry.amount_owed, entry.amount_paid)
    entry.balance = balance
    entry.status = status.value


async def _apply_payment(db: AsyncSession, payload: PaymentCreate) -> PaymentReceipt:
    """One read-modify-write of a single ledger row, committed as one transaction."""
    student = await student_service.find_student_by_id(db, payload.student_id)
    amount = to_money(payload.amount_paid)

    entry = (
        await db.execute(
            ledger_entry_for_update(student.id, payload.term, payload.month, payload.academic_year)
        )
    ).unique().scalar_one_or_none()

    if entry is None:
        amount_owed = await fee_settings_service.resolve_amount_owed(
            db, student.level, payload.academic_year, payload.term
        )
        entry = LedgerEntry(
            student_id=student.id,
            term=payload.term,
            month=payload.month,
            academic_year=payload.academic_year,
            amount_owed=to_money(amount_owed),
            amount_paid=amount,
            payment_date=payload.payment_date,
        )
        _apply_classification(entry)
        db.add(entry)
        await db.flush()
        old_value = None
        action = AuditAction.CREATE
    else:
        old_value = _entry_snapshot(entry)
        entry.amount_paid = to_money(entry.amount_paid) + amount
        entry.payment_date = max(entry.payment_date, payload.payment_date)
        _apply_classification(entry)
        await db.flush()
        action = AuditAction.UPDATE

    new_value = _entry_snapshot(entry)
    new_value["payment_received"] = str(amount)
    await log_fee_audit(db, LEDGER_TABLE, entry.id, action, old_value, new_value)
    await db.commit()

    if entry.balance < ZERO:
        logger.info(
            "Student %s has overpaid %s %s %s by %s; kept as credit",
            student.full_name, payload.term, payload.month, payload.academic_year, -entry.balance,
        )
    logger.info(
        "Recorded payment of %s for student %s (%s %s %s): status %s",
        amount, student.id, payload.term, payload.month, payload.academic_year, entry.status,
    )

    return PaymentReceipt(
        student_name=student.full_name,
        class_name=student.class_label,
        term=entry.term,
        month=entry.month,
        amount_paid=amount,
        balance=receipt_balance(entry.balance),
        credit=credit_amount(entry.balance),
        payment_date=entry.payment_date,
        amount_owed=to_decimal(entry.amount_owed),
        payment_status=entry.status,
    )


async def record_payment(db: AsyncSession, payload: PaymentCreate) -> PaymentReceipt:
    """
    Add a payment to the ledger row for (student, term, month, academic year), creating
    the row from the active fee schedule on first payment. The row is locked for the
    duration of the update; if another request inserts the same key first, the unique
    constraint rejects our insert and the payment is retried against that row.
    """
    if payload.amount_paid < ZERO:
        raise ValidationError("Payment amount must not be negative")

    attempts = settings.payment_max_retries
    for attempt in range(1, attempts + 1):
        try:
            return await _apply_payment(db, payload)
        except ServiceError:
            await db.rollback()
            raise
        except IntegrityError:
            await db.rollback()
            logger.warning(
                "Concurrent write on ledger key (%s, %s, %s, %s); attempt %d of %d",
                payload.student_id, payload.term, payload.month, payload.academic_year, attempt, attempts,
            )
    raise ConflictError("Payment could not be recorded due to concurrent updates; try again")


async def get_student_payments(
    db: AsyncSession,
    student_id,
    term: str,
    academic_year: str,
) -> List[LedgerEntryResponse]:
    result = await db.execute(
        select(LedgerEntry)
        .where(
            LedgerEntry.student_id == student_id,
            LedgerEntry.term == term,
            LedgerEntry.academic_year == academic_year,
        )
        .order_by(LedgerEntry.payment_date, LedgerEntry.month)
    )
    return [to_entry_response(e) for e in result.unique().scalars().all()]


async def get_payments_by_date(db: AsyncSession, day: date) -> List[LedgerEntryResponse]:
    result = await db.execute(
        select(LedgerEntry).where(LedgerEntry.payment_date == day).order_by(LedgerEntry.created_at)
    )
    return [to_entry_response(e) for e in result.unique().scalars().all()]


# --- Repair ---
async def _repair_entry(db: AsyncSession, entry: LedgerEntry) -> Optional[str]:
    """
    Re-derive balance and status for one row. Amounts are never touched.
    Returns the corrected status when the row changed, else None.
    """
    balance, status = classify(entry.amount_owed, entry.amount_paid)
    if entry.status == status.value and to_decimal(entry.balance) == balance:
        return None
    old_value = _entry_snapshot(entry)
    entry.balance = balance
    entry.status = status.value
    await log_fee_audit(db, LEDGER_TABLE, entry.id, AuditAction.REPAIR, old_value, _entry_snapshot(entry))
    return status.value


async def repair_inconsistent_statuses(db: AsyncSession) -> RepairResult:
    """Correct every ledger row whose stored balance or status disagrees with its amounts."""
    result = await db.execute(select(LedgerEntry).order_by(LedgerEntry.created_at))
    corrected = 0
    for entry in result.unique().scalars().all():
        try:
            if await _repair_entry(db, entry):
                corrected += 1
        except (InvalidOperation, TypeError, ValueError):
            logger.warning("Could not re-derive status for ledger entry %s; skipping", entry.id, exc_info=True)
    await db.commit()
    logger.info("Fixed payment status for %d ledger entries", corrected)
    return RepairResult(corrected=corrected)


async def repair_student_payments(db: AsyncSession, name: str) -> StudentRepairResult:
    """Repair restricted to students whose full name contains name. Reports every row it looked at."""
    students: List[Student] = await student_service.find_students_by_name(db, name)
    if not students:
        return StudentRepairResult(messages=[f"No students found matching name: {name}"], fixed_count=0)

    messages: List[str] = []
    fixed = 0
    for student in students:
        messages.append(f"Processing student: {student.full_name}")
        result = await db.execute(
            select(LedgerEntry).where(LedgerEntry.student_id == student.id).order_by(LedgerEntry.created_at)
        )
        entries = result.unique().scalars().all()
        if not entries:
            messages.append("No payments found for this student")
            continue
        for entry in entries:
            messages.append(f"Payment ID: {entry.id}, Status: {entry.status}, Balance: {entry.balance}")
            try:
                new_status = await _repair_entry(db, entry)
            except (InvalidOperation, TypeError, ValueError):
                logger.warning("Could not re-derive status for ledger entry %s; skipping", entry.id, exc_info=True)
                messages.append("Skipped: amounts could not be read")
                continue
            if new_status:
                messages.append(f"Fixed: Changed status to {new_status}")
                fixed += 1
    await db.commit()
    messages.append(f"Fixed {fixed} payment records")
    return StudentRepairResult(messages=messages, fixed_count=fixed)
