from app.core.models.student import Student
from app.core.models.fee_setting import FeeSetting
from app.core.models.ledger_entry import LedgerEntry
from app.core.models.fee_audit_log import FeeAuditLog

__all__ = [
    "Student",
    "FeeSetting",
    "LedgerEntry",
    "FeeAuditLog",
]
