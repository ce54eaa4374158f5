"""Payment status classification shared by the payment path and the repair path."""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple

from app.core.enums import PaymentStatus

ZERO = Decimal("0")
CENT = Decimal("0.01")


class Classification(NamedTuple):
    balance: Decimal
    status: PaymentStatus


def to_decimal(val) -> Decimal:
    if val is None:
        return ZERO
    return val if isinstance(val, Decimal) else Decimal(str(val))


def to_money(val) -> Decimal:
    """Decimal rounded to whole cents, the precision every ledger amount is stored at."""
    return to_decimal(val).quantize(CENT, rounding=ROUND_HALF_UP)


def classify(amount_owed, amount_paid) -> Classification:
    """
    Derive (balance, status) from the two amounts, both rounded to cents first so the
    result matches what the ledger stores. balance is signed: a negative value is a
    credit from overpayment and still classifies as FULL_PAYMENT.
    """
    owed = to_money(amount_owed)
    paid = to_money(amount_paid)
    balance = owed - paid
    if balance <= ZERO:
        return Classification(balance, PaymentStatus.FULL_PAYMENT)
    if paid > ZERO:
        return Classification(balance, PaymentStatus.PART_PAYMENT)
    return Classification(balance, PaymentStatus.NON_PAYER)


def receipt_balance(balance) -> Decimal:
    """Balance as shown to payers: credits are reported separately, never as a negative balance."""
    return max(ZERO, to_decimal(balance))


def credit_amount(balance) -> Decimal:
    return max(ZERO, -to_decimal(balance))
