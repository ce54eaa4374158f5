"""Fee ledger entry: one billing obligation per student, term, month and academic year."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.core.enums import PaymentStatus
from app.db.session import Base


class LedgerEntry(Base):
    """
    amount_owed is fixed at creation from the fee schedule. amount_paid only grows.
    balance and status are always derived from the two amounts; never set them directly.
    A negative balance is kept as-is and represents a credit.
    """

    __tablename__ = "fee_ledger_entries"
    __table_args__ = (
        UniqueConstraint(
            "student_id",
            "term",
            "month",
            "academic_year",
            name="uq_fee_ledger_student_term_month_year",
        ),
        CheckConstraint("amount_paid >= 0", name="chk_fee_ledger_amount_paid_non_negative"),
        CheckConstraint(
            "status IN ('NON_PAYER','PART_PAYMENT','FULL_PAYMENT')",
            name="chk_fee_ledger_status",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True)
    term = Column(String(20), nullable=False)
    month = Column(String(20), nullable=False)
    academic_year = Column(String(20), nullable=False)
    amount_owed = Column(Numeric(12, 2), nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False, default=0)
    balance = Column(Numeric(12, 2), nullable=False)
    status = Column(String(20), nullable=False, default=PaymentStatus.NON_PAYER.value)
    payment_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", backref="ledger_entries", lazy="joined")
