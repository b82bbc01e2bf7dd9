import json
import logging
from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlmodel import Session

from thrifthub.core.exceptions.app_exception import AuthenticationException, ValidationException
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.email import EmailService
from thrifthub.helpers.payment.charges import apply_successful_charge, find_charge_payment, mark_failed
from thrifthub.integration.paystack import PaystackClient, from_pesewas, get_paystack
from thrifthub.models.order.order import Order
from thrifthub.models.user.user import User

db_session = get_session
email_service = EmailService()


class WebhookRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/webhooks/paystack", self.paystack_webhook, methods=["POST"], response_model=ApiResponse[None])

    async def paystack_webhook(
        self,
        request: Request,
        background_tasks: BackgroundTasks,
        session: Session = Depends(db_session),
        paystack: PaystackClient = Depends(get_paystack),
    ):
        body = await request.body()
        signature = request.headers.get("x-paystack-signature")
        if not signature:
            raise ValidationException("Missing signature")
        if not paystack.verify_signature(body, signature):
            raise AuthenticationException("Invalid signature")

        try:
            event = json.loads(body)
        except ValueError:
            raise ValidationException("Malformed webhook payload")

        event_type = event.get("event")
        data = event.get("data") or {}
        if event_type == "charge.success":
            self._charge_success(session, data, background_tasks)
        elif event_type == "charge.failed":
            self._charge_failed(session, data)
        else:
            logging.info(f"WEBHOOK >>> Ignoring Paystack event {event_type}")

        return ok(None, "Webhook processed successfully")

    def _find_payment(self, session: Session, reference: str, metadata=None):
        payment = find_charge_payment(session, reference, metadata)
        if not payment:
            logging.error(f"WEBHOOK >>> No payment for reference {reference}")
        return payment

    def _charge_success(self, session: Session, data: dict, background_tasks: BackgroundTasks):
        reference = data.get("reference")
        payment = self._find_payment(session, reference, data.get("metadata"))
        if not payment:
            return
        if payment.last_settled_ref == reference:
            logging.info(f"WEBHOOK >>> Charge {reference} already settled")
            return

        amount = from_pesewas(data.get("amount", 0))
        fully_paid = apply_successful_charge(
            session, payment, amount,
            authorization_code=(data.get("authorization") or {}).get("authorization_code"),
            customer_code=(data.get("customer") or {}).get("customer_code"),
            reference=reference,
        )
        session.commit()

        order = session.get(Order, payment.order_id)
        user = session.get(User, order.user_id)
        email_service.send_payment_confirmation_email(user.email, order.order_number, amount, fully_paid, background_tasks)

    def _charge_failed(self, session: Session, data: dict):
        payment = self._find_payment(session, data.get("reference"))
        if not payment:
            return
        mark_failed(session, payment, data.get("gateway_response") or data.get("message") or "")
        session.commit()
