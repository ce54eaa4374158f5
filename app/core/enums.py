from enum import Enum


class PaymentStatus(str, Enum):
    NON_PAYER = "NON_PAYER"
    PART_PAYMENT = "PART_PAYMENT"
    FULL_PAYMENT = "FULL_PAYMENT"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    REPAIR = "REPAIR"
