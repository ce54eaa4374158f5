"""Excel exports of ledger entries and student payment history."""

import io
import re
from typing import List
from uuid import UUID

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings

from . import service

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")

ALL_PAYMENTS_HEADERS = (
    "Student ID",
    "Student Name",
    "Class",
    "Term",
    "Month",
    "Academic Year",
    "Fee Amount",
    "Amount Paid",
    "Balance",
    "Payment Status",
    "Payment Date",
)
HISTORY_HEADERS = (
    "Term",
    "Month",
    "Academic Year",
    "Fee Amount",
    "Amount Paid",
    "Balance",
    "Payment Status",
    "Payment Date",
)


def _bold_row(ws, row: int) -> None:
    for cell in ws[row]:
        cell.font = Font(bold=True)


def _autosize(ws, n_columns: int) -> None:
    for idx in range(1, n_columns + 1):
        letter = get_column_letter(idx)
        width = max((len(str(c.value)) for c in ws[letter] if c.value is not None), default=8)
        ws.column_dimensions[letter].width = min(width + 2, 60)


def _to_bytes(wb: Workbook) -> bytes:
    bio = io.BytesIO()
    wb.save(bio)
    return bio.getvalue()


async def export_all_payments(db: AsyncSession, term: str, academic_year: str) -> bytes:
    """One row per ledger entry of the term and academic year."""
    entries = await service.get_period_entries(db, term, academic_year)
    wb = Workbook()
    ws = wb.active
    ws.title = "All Payments"
    ws.append(list(ALL_PAYMENTS_HEADERS))
    _bold_row(ws, 1)
    for e in sorted(entries, key=lambda x: (x.student.class_label, x.student.last_name, x.month)):
        ws.append([
            e.student.student_number,
            e.student.full_name,
            e.student.class_label,
            e.term,
            e.month,
            e.academic_year,
            float(e.amount_owed),
            float(e.amount_paid),
            float(e.balance),
            e.status,
            e.payment_date.isoformat(),
        ])
    _autosize(ws, len(ALL_PAYMENTS_HEADERS))
    return _to_bytes(wb)


async def export_student_payment_history(db: AsyncSession, student_id: UUID) -> bytes:
    """Student info block, one row per ledger entry, then a totals block."""
    history = await service.get_student_payment_history(db, student_id)
    wb = Workbook()
    ws = wb.active
    ws.title = "Payment History"
    ws.append([settings.school_name])
    ws.append(["Student Name:", history.student_name])
    ws.append(["Class:", history.class_name])
    ws.append([])
    ws.append(list(HISTORY_HEADERS))
    _bold_row(ws, ws.max_row)
    for p in history.payments:
        ws.append([
            p.term,
            p.month,
            p.academic_year,
            float(p.amount_owed),
            float(p.amount_paid),
            float(p.balance),
            p.status.value,
            p.payment_date.isoformat(),
        ])
    ws.append([])
    ws.append(["Summary"])
    _bold_row(ws, ws.max_row)
    ws.append(["Total Paid:", float(history.total_paid)])
    ws.append(["Total Balance:", float(history.total_balance)])
    _autosize(ws, len(HISTORY_HEADERS))
    return _to_bytes(wb)


def attachment_headers(filename: str) -> dict:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


def export_filename(*parts: str) -> str:
    """Join parts with "_", whitespace becomes "-" and anything outside [A-Za-z0-9._-] is dropped."""
    cleaned: List[str] = [UNSAFE_FILENAME_CHARS.sub("", "-".join(str(p).split())) for p in parts if p]
    return "_".join(c for c in cleaned if c) + ".xlsx"
