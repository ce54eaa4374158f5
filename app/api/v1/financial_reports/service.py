"""Financial reports: period report, payment history, trends, class comparison, audit trail."""

from collections import defaultdict
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.fee_payments import aggregation
from app.api.v1.fee_payments.schemas import LedgerEntryResponse
from app.api.v1.fee_payments.service import to_entry_response
from app.api.v1.students import service as student_service
from app.core.enums import PaymentStatus
from app.core.models import FeeAuditLog, LedgerEntry, Student
from app.core.payment_status import ZERO, to_decimal

from .schemas import (
    AuditLogItem,
    ClassComparison,
    FinancialReport,
    PaymentRecord,
    PaymentTrend,
    StudentPaymentHistory,
)


async def generate_financial_report(
    db: AsyncSession,
    term: str,
    academic_year: str,
    start_date: date,
    end_date: date,
) -> FinancialReport:
    """
    Totals and class summaries cover every ledger entry of the term and academic year.
    The date range only bounds the daily summaries. Students never billed have no
    entries and so are absent from every figure.
    """
    aggregation.validate_date_range(start_date, end_date)

    entries = await aggregation.load_period_entries(db, term, academic_year)
    total_collected = aggregation.sum_collected(entries)
    total_outstanding = aggregation.sum_outstanding(entries)

    return FinancialReport(
        report_date=date.today(),
        term=term,
        academic_year=academic_year,
        start_date=start_date,
        end_date=end_date,
        total_expected_revenue=total_collected + total_outstanding,
        total_collected_amount=total_collected,
        total_outstanding_amount=total_outstanding,
        class_summaries=aggregation.summarize_by_class(entries),
        daily_summaries=await aggregation.daily_summaries(db, start_date, end_date),
    )


# --- Student payment history ---
def _to_payment_record(entry: LedgerEntry) -> PaymentRecord:
    return PaymentRecord(
        term=entry.term,
        month=entry.month,
        academic_year=entry.academic_year,
        amount_owed=to_decimal(entry.amount_owed),
        amount_paid=to_decimal(entry.amount_paid),
        balance=to_decimal(entry.balance),
        payment_date=entry.payment_date,
        status=entry.status,
    )


async def _history_for(db: AsyncSession, student: Student) -> StudentPaymentHistory:
    result = await db.execute(
        select(LedgerEntry)
        .where(LedgerEntry.student_id == student.id)
        .order_by(LedgerEntry.academic_year, LedgerEntry.term, LedgerEntry.payment_date)
    )
    entries = result.unique().scalars().all()
    return StudentPaymentHistory(
        student_id=student.id,
        student_name=student.full_name,
        class_name=student.class_label,
        total_paid=aggregation.sum_collected(entries),
        total_balance=aggregation.sum_outstanding(entries),
        payments=[_to_payment_record(e) for e in entries],
    )


async def get_student_payment_history(db: AsyncSession, student_id: UUID) -> StudentPaymentHistory:
    student = await student_service.find_student_by_id(db, student_id)
    return await _history_for(db, student)


async def get_all_student_payment_history(db: AsyncSession) -> List[StudentPaymentHistory]:
    result = await db.execute(select(Student).order_by(Student.form, Student.section, Student.last_name))
    return [await _history_for(db, s) for s in result.scalars().all()]


# --- Trends ---
async def get_payment_trends(db: AsyncSession, start_date: date, end_date: date) -> List[PaymentTrend]:
    """Per-day amount and entry count in one grouped query. Days without entries are omitted."""
    aggregation.validate_date_range(start_date, end_date)
    result = await db.execute(
        select(
            LedgerEntry.payment_date,
            func.coalesce(func.sum(LedgerEntry.amount_paid), 0),
            func.count(LedgerEntry.id),
        )
        .where(LedgerEntry.payment_date >= start_date, LedgerEntry.payment_date <= end_date)
        .group_by(LedgerEntry.payment_date)
        .order_by(LedgerEntry.payment_date)
    )
    return [
        PaymentTrend(date=day, total_amount=to_decimal(amount), transaction_count=int(count))
        for day, amount, count in result.all()
        if count
    ]


# --- Class comparison ---
async def get_class_comparison(db: AsyncSession, academic_year: str) -> List[ClassComparison]:
    result = await db.execute(select(LedgerEntry).where(LedgerEntry.academic_year == academic_year))
    groups: Dict[str, List[LedgerEntry]] = defaultdict(list)
    for entry in result.unique().scalars().all():
        if entry.student is None:
            continue
        groups[aggregation.class_ref_of(entry).label].append(entry)

    out = []
    for class_name in sorted(groups):
        class_entries = groups[class_name]
        students = len({e.student_id for e in class_entries})
        collected = aggregation.sum_collected(class_entries)
        outstanding = aggregation.sum_outstanding(class_entries)
        expected = collected + outstanding
        if expected > ZERO:
            rate = float((collected / expected).quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP) * 100)
        else:
            rate = 0.0
        average = (
            (collected / students).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) if students else ZERO
        )
        out.append(
            ClassComparison(
                class_name=class_name,
                total_collected=collected,
                total_students=students,
                total_outstanding=outstanding,
                collection_rate=rate,
                average_per_student=average,
            )
        )
    return out


async def get_outstanding_payments(db: AsyncSession, term: str, academic_year: str) -> List[LedgerEntryResponse]:
    """Entries of the period that are not fully paid."""
    result = await db.execute(
        select(LedgerEntry)
        .where(
            LedgerEntry.term == term,
            LedgerEntry.academic_year == academic_year,
            LedgerEntry.status != PaymentStatus.FULL_PAYMENT.value,
        )
        .order_by(LedgerEntry.payment_date)
    )
    return [to_entry_response(e) for e in result.unique().scalars().all()]


async def get_payment_audit_logs(db: AsyncSession, start_date: date, end_date: date) -> List[AuditLogItem]:
    aggregation.validate_date_range(start_date, end_date)
    start = datetime.combine(start_date, time.min)
    end = datetime.combine(end_date + timedelta(days=1), time.min)
    result = await db.execute(
        select(FeeAuditLog)
        .where(FeeAuditLog.created_at >= start, FeeAuditLog.created_at < end)
        .order_by(FeeAuditLog.created_at)
    )
    return [AuditLogItem.model_validate(log) for log in result.scalars().all()]


async def get_period_entries(db: AsyncSession, term: str, academic_year: str) -> List[LedgerEntry]:
    return await aggregation.load_period_entries(db, term, academic_year)

