"""Fee payment schemas: payment input, receipts, ledger rows and aggregation results."""

import datetime as dt
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import PaymentStatus


class ClassRef(BaseModel):
    """Class identity used for grouping. Compared by (form, section), never by label text."""

    form: str
    section: str

    class Config:
        frozen = True

    @property
    def label(self) -> str:
        return f"{self.form} {self.section}"


# --- Payment ---
class PaymentCreate(BaseModel):
    student_id: UUID
    term: str = Field(..., max_length=20, description="e.g. Term 2")
    month: str = Field(..., max_length=20, description="e.g. July")
    academic_year: str = Field(..., max_length=20, description="e.g. 2025")
    amount_paid: Decimal = Field(..., ge=0, decimal_places=2)
    payment_date: date = Field(default_factory=date.today)


class PaymentReceipt(BaseModel):
    student_name: str
    class_name: str
    term: str
    month: str
    amount_paid: Decimal  # this payment only, not the cumulative total
    balance: Decimal  # never negative; see credit
    credit: Decimal = Decimal("0")
    payment_date: date
    amount_owed: Decimal
    payment_status: PaymentStatus


class LedgerEntryResponse(BaseModel):
    id: UUID
    student_id: UUID
    student_name: Optional[str] = None
    class_name: Optional[str] = None
    term: str
    month: str
    academic_year: str
    amount_owed: Decimal
    amount_paid: Decimal
    balance: Decimal
    status: PaymentStatus
    payment_date: date
    created_at: datetime
    updated_at: datetime


# --- Status by class ---
class StudentPaymentInfo(BaseModel):
    student_id: UUID
    name: str
    class_name: str
    amount_paid: Decimal
    balance: Decimal
    status: PaymentStatus


class PaymentStatusSummary(BaseModel):
    class_name: str
    status: PaymentStatus
    students: List[StudentPaymentInfo]


# --- Daily / class aggregation ---
class DailyPaymentSummary(BaseModel):
    date: dt.date
    total_amount: Decimal
    total_transactions: int


class ClassFinancialSummary(BaseModel):
    class_name: str
    form: str
    section: str
    total_students: int
    full_payments: int
    part_payments: int
    non_payers: int
    total_collected: Decimal
    total_outstanding: Decimal


# --- Repair ---
class RepairResult(BaseModel):
    corrected: int


class StudentRepairResult(BaseModel):
    messages: List[str]
    fixed_count: int
