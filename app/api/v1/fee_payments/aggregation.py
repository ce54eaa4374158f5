"""
Read-only aggregations over fee ledger entries.

None of these take locks. A query running alongside a payment may see the ledger
just before or just after that payment commits.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import PaymentStatus
from app.core.exceptions import ValidationError
from app.core.models import LedgerEntry, Student
from app.core.payment_status import ZERO, to_decimal

from .schemas import (
    ClassFinancialSummary,
    ClassRef,
    DailyPaymentSummary,
    PaymentStatusSummary,
    StudentPaymentInfo,
)

logger = logging.getLogger(__name__)


def validate_date_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise ValidationError("start_date must not be after end_date")


def iter_dates(start_date: date, end_date: date) -> Iterator[date]:
    """Every date in [start_date, end_date]. Raises ValidationError when the range is inverted."""
    validate_date_range(start_date, end_date)
    day = start_date
    while day <= end_date:
        yield day
        day += timedelta(days=1)


def class_ref_of(entry: LedgerEntry) -> ClassRef:
    return ClassRef(form=entry.student.form, section=entry.student.section)


def to_student_payment_info(entry: LedgerEntry) -> StudentPaymentInfo:
    student = entry.student
    return StudentPaymentInfo(
        student_id=student.id,
        name=student.full_name,
        class_name=student.class_label,
        amount_paid=to_decimal(entry.amount_paid),
        balance=to_decimal(entry.balance),
        status=entry.status,
    )


async def payment_status_by_class(db: AsyncSession, class_ref: ClassRef) -> List[PaymentStatusSummary]:
    """One summary per status value, in enum order, including statuses with no students."""
    result = await db.execute(
        select(LedgerEntry)
        .join(Student, LedgerEntry.student_id == Student.id)
        .where(Student.form == class_ref.form, Student.section == class_ref.section)
        .order_by(Student.last_name, Student.first_name, LedgerEntry.payment_date)
    )
    by_status: Dict[str, List[StudentPaymentInfo]] = defaultdict(list)
    for entry in result.unique().scalars().all():
        by_status[entry.status].append(to_student_payment_info(entry))
    return [
        PaymentStatusSummary(
            class_name=class_ref.label,
            status=status,
            students=by_status.get(status.value, []),
        )
        for status in PaymentStatus
    ]


async def daily_summary(db: AsyncSession, day: date) -> DailyPaymentSummary:
    """Sum of amount_paid and entry count for entries last paid on day. Zero, not an error, when empty."""
    row = (
        await db.execute(
            select(
                func.coalesce(func.sum(LedgerEntry.amount_paid), 0),
                func.count(LedgerEntry.id),
            ).where(LedgerEntry.payment_date == day)
        )
    ).one()
    total_amount, total_transactions = row
    return DailyPaymentSummary(
        date=day,
        total_amount=to_decimal(total_amount),
        total_transactions=int(total_transactions or 0),
    )


async def daily_summaries(db: AsyncSession, start_date: date, end_date: date) -> List[DailyPaymentSummary]:
    """
    Daily summaries over [start_date, end_date], omitting days without transactions.
    A day whose query fails is logged and left out; the session is rolled back first
    so the remaining days run in a usable transaction.
    """
    out: List[DailyPaymentSummary] = []
    for day in iter_dates(start_date, end_date):
        try:
            summary = await daily_summary(db, day)
        except SQLAlchemyError:
            await db.rollback()
            logger.warning("Daily summary failed for %s; skipping", day, exc_info=True)
            continue
        if summary.total_transactions > 0:
            out.append(summary)
    return out


async def load_period_entries(db: AsyncSession, term: str, academic_year: str) -> List[LedgerEntry]:
    result = await db.execute(
        select(LedgerEntry).where(
            LedgerEntry.term == term,
            LedgerEntry.academic_year == academic_year,
        )
    )
    return list(result.unique().scalars().all())


def summarize_by_class(entries: Iterable[LedgerEntry]) -> List[ClassFinancialSummary]:
    """
    Group entries by class and count them per status. The three status counts always
    add up to total_students (the number of entries for that class).
    """
    groups: Dict[ClassRef, List[LedgerEntry]] = defaultdict(list)
    for entry in entries:
        if entry.student is None:
            logger.warning("Ledger entry %s has no student; left out of class summaries", entry.id)
            continue
        if entry.status not in PaymentStatus.__members__:
            logger.warning("Ledger entry %s has unknown status %r; left out of class summaries", entry.id, entry.status)
            continue
        groups[class_ref_of(entry)].append(entry)

    summaries = []
    for ref in sorted(groups, key=lambda r: (r.form, r.section)):
        class_entries = groups[ref]
        counts = {status: 0 for status in PaymentStatus}
        collected = ZERO
        outstanding = ZERO
        for entry in class_entries:
            counts[PaymentStatus(entry.status)] += 1
            collected += to_decimal(entry.amount_paid)
            outstanding += to_decimal(entry.balance)
        summaries.append(
            ClassFinancialSummary(
                class_name=ref.label,
                form=ref.form,
                section=ref.section,
                total_students=len(class_entries),
                full_payments=counts[PaymentStatus.FULL_PAYMENT],
                part_payments=counts[PaymentStatus.PART_PAYMENT],
                non_payers=counts[PaymentStatus.NON_PAYER],
                total_collected=collected,
                total_outstanding=outstanding,
            )
        )
    return summaries


def sum_collected(entries: Iterable[LedgerEntry]) -> Decimal:
    return sum((to_decimal(e.amount_paid) for e in entries), ZERO)


def sum_outstanding(entries: Iterable[LedgerEntry]) -> Decimal:
    return sum((to_decimal(e.balance) for e in entries), ZERO)
