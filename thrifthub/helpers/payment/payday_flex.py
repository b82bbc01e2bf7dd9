"""
Payday Flex: a 50/50 split of the order total into two installments.

The first installment is charged at checkout, the second on the payday the
student picks (between 7 and 30 days ahead).
"""
from datetime import date, timedelta
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Optional, Tuple

from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.utils.dates import today as utc_today

PESEWA = Decimal("0.01")
MIN_PAYDAY_DAYS = 7
MAX_PAYDAY_DAYS = 30
PAYDAY_WINDOW_MESSAGE = f"Payday date must be between {MIN_PAYDAY_DAYS} and {MAX_PAYDAY_DAYS} days from today"


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(PESEWA, rounding=ROUND_HALF_UP)


def split_installments(total) -> Tuple[Decimal, Decimal]:
    """Returns (first, second); first is rounded up to the pesewa and second is the exact remainder."""
    total = to_money(total)
    first = (total * Decimal("0.5")).quantize(PESEWA, rounding=ROUND_CEILING)
    return first, total - first


def payday_window(reference: Optional[date] = None) -> Tuple[date, date]:
    reference = reference or utc_today()
    return reference + timedelta(days=MIN_PAYDAY_DAYS), reference + timedelta(days=MAX_PAYDAY_DAYS)


def validate_payday_date(payday_date: date, reference: Optional[date] = None) -> date:
    earliest, latest = payday_window(reference)
    if payday_date < earliest or payday_date > latest:
        raise ValueError(PAYDAY_WINDOW_MESSAGE)
    return payday_date


def effective_status(payment, reference: Optional[date] = None) -> PaymentStatus:
    """Stored status, except a partial installment past its payday reads as overdue."""
    reference = reference or utc_today()
    if (
        payment.method == PaymentMethod.INSTALLMENT
        and payment.status == PaymentStatus.PARTIAL
        and payment.payday_date is not None
        and payment.payday_date < reference
    ):
        return PaymentStatus.OVERDUE
    return payment.status
