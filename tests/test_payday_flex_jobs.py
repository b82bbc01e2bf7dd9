from datetime import timedelta
from decimal import Decimal

from thrifthub.email import EmailService
from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.functions.payment.payday_flex_jobs import charge_due_installments, send_payday_reminders
from thrifthub.utils.dates import today
from tests.conftest import INTERNAL_HEADERS


class RecordingEmailService(EmailService):
    def __init__(self):
        super().__init__()
        self.sent = []

    def send_email(self, to_email, subject, html_content, background_tasks=None):
        self.sent.append((to_email, subject))


def partial_installment(factory, user, zone, payday_offset=0, authorization_code="AUTH_saved"):
    product = factory.create_product(price="95.00")
    return factory.create_order(
        user, zone, lines=[(product, 1)],
        method=PaymentMethod.INSTALLMENT,
        payment_status=PaymentStatus.PARTIAL,
        paid_amount="50.00",
        first_amount=Decimal("50.00"),
        second_amount=Decimal("50.00"),
        payday_date=today() + timedelta(days=payday_offset),
        authorization_code=authorization_code,
    )


def test_charges_due_installments(session, factory, paystack, gateway):
    user = factory.create_user()
    zone = factory.create_zone(delivery_fee="5.00")
    due = partial_installment(factory, user, zone, payday_offset=0)
    overdue = partial_installment(factory, user, zone, payday_offset=-3)
    later = partial_installment(factory, user, zone, payday_offset=5)
    emails = RecordingEmailService()

    result = charge_due_installments(session=session, paystack=paystack, email_service=emails)

    assert (result.total, result.successful, result.failed) == (2, 2, 0)
    for order in (due, overdue):
        payment = factory.payment_for(order)
        assert payment.status == PaymentStatus.PAID
        assert payment.remaining_amount == Decimal("0.00")
        assert payment.transaction_ref.startswith("THB-PAY2-")
    assert factory.payment_for(later).status == PaymentStatus.PARTIAL

    charge = next(payload for path, payload in gateway.requests if path == "/transaction/charge_authorization")
    assert charge["authorization_code"] == "AUTH_saved"
    assert charge["amount"] == 5000
    assert [subject for _, subject in emails.sent] == ["Payment Confirmed - ThriftHub"] * 2


def test_declined_charge_marks_failed(session, factory, paystack, gateway):
    gateway.decline_charges = True
    order = partial_installment(factory, factory.create_user(), factory.create_zone())
    emails = RecordingEmailService()

    result = charge_due_installments(session=session, paystack=paystack, email_service=emails)

    assert (result.successful, result.failed) == (0, 1)
    assert factory.payment_for(order).status == PaymentStatus.FAILED
    assert len(emails.sent) == 1


def test_missing_authorization_counts_as_failed(session, factory, paystack, gateway):
    order = partial_installment(factory, factory.create_user(), factory.create_zone(), authorization_code=None)

    result = charge_due_installments(session=session, paystack=paystack, email_service=RecordingEmailService())

    assert (result.total, result.failed) == (1, 1)
    assert "Missing authorization code" in result.errors[0]
    assert factory.payment_for(order).status == PaymentStatus.PARTIAL
    assert gateway.requests == []


def test_reminders_for_payments_due_in_three_days(session, factory):
    user = factory.create_user()
    zone = factory.create_zone()
    partial_installment(factory, user, zone, payday_offset=3)
    partial_installment(factory, user, zone, payday_offset=4)
    emails = RecordingEmailService()

    assert send_payday_reminders(session=session, email_service=emails) == 1
    assert emails.sent == [(user.email, "Payday Reminder: 3 days until auto-charge - ThriftHub")]


def test_charge_second_endpoint_requires_internal_key(client, factory):
    assert client.post("/payments/payday-flex/charge-second").status_code == 401

    partial_installment(factory, factory.create_user(), factory.create_zone())
    response = client.post("/payments/payday-flex/charge-second", headers=INTERNAL_HEADERS)

    assert response.status_code == 200
    assert response.json()["data"] == {"total": 1, "successful": 1, "failed": 0, "errors": []}
