"""Financial report schemas."""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel

from app.api.v1.fee_payments.schemas import ClassFinancialSummary, DailyPaymentSummary
from app.core.enums import PaymentStatus


class FinancialReport(BaseModel):
    """Point-in-time report for a term and academic year. Recomputed on every request."""

    report_date: date
    term: str
    academic_year: str
    start_date: date
    end_date: date
    total_expected_revenue: Decimal
    total_collected_amount: Decimal
    total_outstanding_amount: Decimal
    class_summaries: List[ClassFinancialSummary]
    daily_summaries: List[DailyPaymentSummary]


# --- Student payment history ---
class PaymentRecord(BaseModel):
    term: str
    month: str
    academic_year: str
    amount_owed: Decimal
    amount_paid: Decimal
    balance: Decimal
    payment_date: date
    status: PaymentStatus


class StudentPaymentHistory(BaseModel):
    student_id: UUID
    student_name: str
    class_name: str
    total_paid: Decimal
    total_balance: Decimal
    payments: List[PaymentRecord]


# --- Trends / comparison ---
class PaymentTrend(BaseModel):
    date: dt.date
    total_amount: Decimal
    transaction_count: int


class ClassComparison(BaseModel):
    class_name: str
    total_collected: Decimal
    total_students: int
    total_outstanding: Decimal
    collection_rate: float
    average_per_student: Decimal


# --- Audit ---
class AuditLogItem(BaseModel):
    id: UUID
    reference_table: str
    reference_id: UUID
    action_type: str
    old_value: Optional[dict] = None
    new_value: Optional[dict] = None
    created_at: datetime

    class Config:
        from_attributes = True
