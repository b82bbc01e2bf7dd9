import json
import logging
import secrets
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional
from sqlmodel import Session, select

from thrifthub.enums.order_status import OrderStatus
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.helpers.payment.payday_flex import to_money
from thrifthub.models.order.order import Order
from thrifthub.models.payment.payment import Payment

REFERENCE_PREFIX = "THB-"


def charge_reference(kind: str, owner_id: int) -> str:
    """THB-<kind>-<epoch ms>-<id>-<6 hex>; the hex suffix keeps same-millisecond calls apart."""
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"{REFERENCE_PREFIX}{kind}-{millis}-{owner_id}-{secrets.token_hex(3)}"


def _metadata_order_id(metadata: Any) -> Optional[int]:
    # Paystack echoes metadata back either as an object or as a JSON string
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            return None
    if not isinstance(metadata, dict):
        return None
    try:
        return int(metadata.get("order_id"))
    except (TypeError, ValueError):
        return None


def find_charge_payment(session: Session, reference: Optional[str], metadata: Any = None) -> Optional[Payment]:
    """
    Payment a Paystack charge belongs to.

    Opening a checkout again replaces `transaction_ref`, so a charge made on an
    earlier checkout of the same order resolves through the `order_id` it
    carries in its metadata.
    """
    if not reference:
        return None
    payment = session.exec(select(Payment).where(Payment.transaction_ref == reference)).first()
    if payment or not reference.startswith(REFERENCE_PREFIX):
        return payment

    order_id = _metadata_order_id(metadata)
    if order_id is None:
        return None
    payment = session.exec(select(Payment).where(Payment.order_id == order_id)).first()
    if payment:
        logging.info(f"PAYMENT >>> Reference {reference} belongs to an earlier checkout of payment {payment.id}")
    return payment


def apply_successful_charge(
    session: Session,
    payment: Payment,
    amount: Decimal,
    authorization_code: Optional[str] = None,
    customer_code: Optional[str] = None,
    reference: Optional[str] = None,
) -> bool:
    """
    Adds a confirmed gateway charge to the payment.

    The payment becomes `paid` once the whole amount is covered and `partial`
    otherwise. The first successful charge moves a pending order into
    processing. A reference that was already settled is ignored, so a webhook
    and a verify call for the same charge count once. Returns True when the
    payment is fully paid. The caller commits.
    """
    if reference and payment.last_settled_ref == reference:
        logging.info(f"PAYMENT >>> Charge {reference} already applied to payment {payment.id}")
        return payment.status == PaymentStatus.PAID

    now = datetime.now(timezone.utc)
    total = to_money(payment.amount)
    paid = min(to_money(payment.paid_amount) + to_money(amount), total)

    payment.paid_amount = paid
    payment.remaining_amount = total - paid
    payment.status = PaymentStatus.PAID if paid >= total else PaymentStatus.PARTIAL
    if reference:
        payment.last_settled_ref = reference
    if authorization_code:
        payment.authorization_code = authorization_code
    if customer_code:
        payment.customer_code = customer_code
    if payment.status == PaymentStatus.PAID:
        payment.paid_at = now
    payment.updated_at = now
    session.add(payment)

    order = session.get(Order, payment.order_id)
    if order and order.status == OrderStatus.PENDING:
        order.status = OrderStatus.PROCESSING
        order.updated_at = now
        session.add(order)

    logging.info(f"PAYMENT >>> Payment {payment.id} received {amount}, now {payment.status.value}")
    return payment.status == PaymentStatus.PAID


def mark_failed(session: Session, payment: Payment, reason: str = "") -> None:
    payment.status = PaymentStatus.FAILED
    payment.updated_at = datetime.now(timezone.utc)
    session.add(payment)
    logging.warning(f"PAYMENT >>> Payment {payment.id} failed: {reason or 'unknown reason'}")
