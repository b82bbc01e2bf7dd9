import logging
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlmodel import Session, select

from thrifthub.database.connection import session_scope
from thrifthub.email import EmailService
from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.helpers.payment.charges import apply_successful_charge, charge_reference, mark_failed
from thrifthub.integration.paystack import PaystackClient, PaystackError, from_pesewas
from thrifthub.models.order.order import Order
from thrifthub.models.payment.payment import Payment
from thrifthub.models.user.user import User
from thrifthub.schemas.payment.payment import ChargeSecondResult


REMINDER_DAYS_AHEAD = 3


def _due_installments(session: Session, reference_date: date):
    return session.exec(
        select(Payment).where(
            Payment.method == PaymentMethod.INSTALLMENT,
            Payment.status == PaymentStatus.PARTIAL,
            Payment.payday_date.is_not(None),
            Payment.payday_date <= reference_date,
        ).order_by(Payment.payday_date, Payment.id)
    ).all()


def _charge_due_installments(session: Session, paystack: PaystackClient, email_service: EmailService, reference_date: date) -> ChargeSecondResult:
    result = ChargeSecondResult()
    payments = _due_installments(session, reference_date)
    result.total = len(payments)

    for payment in payments:
        order = session.get(Order, payment.order_id)
        user = session.get(User, order.user_id)
        remaining = payment.remaining_amount

        if not payment.authorization_code:
            result.failed += 1
            result.errors.append(f"Payment {payment.id}: Missing authorization code")
            logging.error(f"PAYMENT >>> Payment {payment.id} has no saved authorization, skipping")
            continue

        reference = charge_reference("PAY2", payment.id)
        try:
            charge = paystack.charge_authorization(payment.authorization_code, user.email, remaining, reference)
        except PaystackError as e:
            charge = {"status": "failed", "gateway_response": e.detail}

        if charge.get("status") == "success":
            payment.transaction_ref = reference
            amount = from_pesewas(charge["amount"]) if charge.get("amount") is not None else remaining
            apply_successful_charge(session, payment, amount, reference=reference)
            session.commit()
            email_service.send_payment_confirmation_email(user.email, order.order_number, remaining, True)
            result.successful += 1
        else:
            reason = charge.get("gateway_response") or "Payment declined"
            mark_failed(session, payment, reason)
            session.commit()
            email_service.send_payment_failure_email(user.email, order.order_number, remaining, reason)
            result.failed += 1
            result.errors.append(f"Payment {payment.id}: {reason}")

    logging.info(f"PAYMENT >>> Second installment run: {result.successful} charged, {result.failed} failed of {result.total}")
    return result


def charge_due_installments(
    session: Optional[Session] = None,
    paystack: Optional[PaystackClient] = None,
    email_service: Optional[EmailService] = None,
    reference_date: Optional[date] = None,
) -> ChargeSecondResult:
    """Charges the second half of every partial installment whose payday has arrived."""
    paystack = paystack or PaystackClient()
    email_service = email_service or EmailService()
    reference_date = reference_date or datetime.now(timezone.utc).date()

    if session is not None:
        return _charge_due_installments(session, paystack, email_service, reference_date)
    with session_scope() as scoped:
        return _charge_due_installments(scoped, paystack, email_service, reference_date)


def send_payday_reminders(session: Optional[Session] = None, email_service: Optional[EmailService] = None, reference_date: Optional[date] = None) -> int:
    email_service = email_service or EmailService()
    reference_date = reference_date or datetime.now(timezone.utc).date()
    due_date = reference_date + timedelta(days=REMINDER_DAYS_AHEAD)

    def _send(db: Session) -> int:
        payments = db.exec(
            select(Payment).where(
                Payment.method == PaymentMethod.INSTALLMENT,
                Payment.status == PaymentStatus.PARTIAL,
                Payment.payday_date == due_date,
            )
        ).all()
        for payment in payments:
            order = db.get(Order, payment.order_id)
            user = db.get(User, order.user_id)
            email_service.send_payday_reminder_email(user.email, order.order_number, payment.remaining_amount, payment.payday_date, REMINDER_DAYS_AHEAD)
        logging.info(f"PAYMENT >>> {len(payments)} payday reminders sent for {due_date}")
        return len(payments)

    if session is not None:
        return _send(session)
    with session_scope() as scoped:
        return _send(scoped)
