"""Fee payments router: record payment, class status, daily summary, ledger lookups, repair."""

from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.students import service as student_service
from app.api.v1.students.schemas import StudentSummary
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    ClassRef,
    DailyPaymentSummary,
    LedgerEntryResponse,
    PaymentCreate,
    PaymentReceipt,
    PaymentStatusSummary,
    RepairResult,
    StudentRepairResult,
)
from . import aggregation, service

router = APIRouter(prefix="/api/v1/fee-payments", tags=["fee-payments"])


@router.post("/record", response_model=PaymentReceipt, status_code=status.HTTP_201_CREATED)
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> PaymentReceipt:
    try:
        return await service.record_payment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/status/class/{form}/{section}", response_model=List[PaymentStatusSummary])
async def get_payment_status_by_class(
    form: str,
    section: str,
    db: AsyncSession = Depends(get_db),
) -> List[PaymentStatusSummary]:
    return await aggregation.payment_status_by_class(db, ClassRef(form=form, section=section))


@router.get("/daily-summary/{day}", response_model=DailyPaymentSummary)
async def get_daily_payment_summary(
    day: date,
    db: AsyncSession = Depends(get_db),
) -> DailyPaymentSummary:
    return await aggregation.daily_summary(db, day)


@router.get(
    "/student/{student_id}/term/{term}/year/{academic_year}",
    response_model=List[LedgerEntryResponse],
)
async def get_student_payments(
    student_id: UUID,
    term: str,
    academic_year: str,
    db: AsyncSession = Depends(get_db),
) -> List[LedgerEntryResponse]:
    return await service.get_student_payments(db, student_id, term, academic_year)


@router.get("/date/{day}", response_model=List[LedgerEntryResponse])
async def get_payments_by_date(
    day: date,
    db: AsyncSession = Depends(get_db),
) -> List[LedgerEntryResponse]:
    return await service.get_payments_by_date(db, day)


@router.get("/search-students", response_model=List[StudentSummary])
async def search_students(
    query: str = Query("", description="First name, last name or student number"),
    db: AsyncSession = Depends(get_db),
) -> List[StudentSummary]:
    return await student_service.search_students(db, query)


@router.post("/fix-payment-status", response_model=RepairResult)
async def repair_payment_statuses(db: AsyncSession = Depends(get_db)) -> RepairResult:
    """Re-derive balance and status on every ledger row. Safe to re-run."""
    return await service.repair_inconsistent_statuses(db)


@router.post("/fix-student-payment/{student_name}", response_model=StudentRepairResult)
async def repair_student_payments(
    student_name: str,
    db: AsyncSession = Depends(get_db),
) -> StudentRepairResult:
    return await service.repair_student_payments(db, student_name)
