"""Financial reports router: period report, history, trends, comparison, audit, Excel exports."""

from datetime import date
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.fee_payments.schemas import LedgerEntryResponse
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    AuditLogItem,
    ClassComparison,
    FinancialReport,
    PaymentTrend,
    StudentPaymentHistory,
)
from . import export, service

router = APIRouter(prefix="/api/v1/financial-reports", tags=["financial-reports"])


@router.get("/generate", response_model=FinancialReport)
async def generate_financial_report(
    term: str = Query(...),
    academic_year: str = Query(...),
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> FinancialReport:
    try:
        return await service.generate_financial_report(db, term, academic_year, start_date, end_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/student-payment-history", response_model=List[StudentPaymentHistory])
async def get_all_student_payment_history(
    db: AsyncSession = Depends(get_db),
) -> List[StudentPaymentHistory]:
    return await service.get_all_student_payment_history(db)


@router.get("/student-payment-history/{student_id}", response_model=StudentPaymentHistory)
async def get_student_payment_history(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentPaymentHistory:
    try:
        return await service.get_student_payment_history(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/payment-trends", response_model=List[PaymentTrend])
async def get_payment_trends(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> List[PaymentTrend]:
    try:
        return await service.get_payment_trends(db, start_date, end_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/class-comparison", response_model=List[ClassComparison])
async def get_class_comparison(
    academic_year: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> List[ClassComparison]:
    return await service.get_class_comparison(db, academic_year)


@router.get("/outstanding-payments", response_model=List[LedgerEntryResponse])
async def get_outstanding_payments(
    term: str = Query(...),
    academic_year: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> List[LedgerEntryResponse]:
    return await service.get_outstanding_payments(db, term, academic_year)


@router.get("/audit-logs", response_model=List[AuditLogItem])
async def get_payment_audit_logs(
    start_date: date = Query(...),
    end_date: date = Query(...),
    db: AsyncSession = Depends(get_db),
) -> List[AuditLogItem]:
    try:
        return await service.get_payment_audit_logs(db, start_date, end_date)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/export/all-payments")
async def export_all_payments(
    term: str = Query(...),
    academic_year: str = Query(...),
    db: AsyncSession = Depends(get_db),
) -> Response:
    content = await export.export_all_payments(db, term, academic_year)
    return Response(
        content=content,
        media_type=export.XLSX_MEDIA_TYPE,
        headers=export.attachment_headers(export.export_filename("payments", term, academic_year)),
    )


@router.get("/export/student-history/{student_id}")
async def export_student_payment_history(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Download one student's ledger history as an Excel workbook."""
    try:
        content = await export.export_student_payment_history(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return Response(
        content=content,
        media_type=export.XLSX_MEDIA_TYPE,
        headers=export.attachment_headers(export.export_filename("payment_history", str(student_id))),
    )
