import logging
from datetime import datetime, timezone
from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, ForbiddenException, NotFoundException, ValidationException
from thrifthub.core.middlewares.internal import require_internal_key
from thrifthub.core.middlewares.users import is_owner_or_admin
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.email import EmailService
from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.functions.payment.payday_flex_jobs import charge_due_installments
from thrifthub.helpers.order.presenters import payment_read
from thrifthub.helpers.payment.charges import REFERENCE_PREFIX, apply_successful_charge, charge_reference, find_charge_payment
from thrifthub.helpers.payment.payday_flex import split_installments
from thrifthub.integration.paystack import PaystackClient, from_pesewas, get_paystack
from thrifthub.models.order.order import Order
from thrifthub.models.payment.payment import Payment
from thrifthub.models.user.user import User
from thrifthub.schemas.payment.payment import (
    ChargeSecondResult,
    InstallmentSchedule,
    MobileMoneyInitialize,
    PaydayFlexInitialize,
    PaymentInitialized,
    PaymentRead,
)

db_session = get_session
get_current_user = AuthRouter().get_current_user
email_service = EmailService()


class PaymentRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/payments/mobile-money/initialize", self.initialize_mobile_money, methods=["POST"], response_model=ApiResponse[PaymentInitialized])
        self.add_api_route("/payments/payday-flex/initialize", self.initialize_payday_flex, methods=["POST"], response_model=ApiResponse[PaymentInitialized])
        self.add_api_route(
            "/payments/payday-flex/charge-second", self.charge_second, methods=["POST"],
            response_model=ApiResponse[ChargeSecondResult], dependencies=[Depends(require_internal_key)],
        )
        self.add_api_route("/payments/verify", self.verify_payment, methods=["GET"], response_model=ApiResponse[PaymentRead])
        self.add_api_route("/payments/{order_id}", self.get_payment, methods=["GET"], response_model=ApiResponse[PaymentRead])

    def _owned_payment(self, session: Session, order_id: int, user: User):
        order = session.get(Order, order_id)
        if not order:
            raise NotFoundException("Order not found")
        if order.user_id != user.id:
            raise ForbiddenException("Access denied to this order")
        payment = session.exec(select(Payment).where(Payment.order_id == order.id)).first()
        if not payment:
            raise NotFoundException("Payment not found")
        return order, payment

    def initialize_mobile_money(
        self,
        data: MobileMoneyInitialize,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
        paystack: PaystackClient = Depends(get_paystack),
    ):
        order, payment = self._owned_payment(session, data.order_id, current_user)
        if payment.method != PaymentMethod.MOBILE_MONEY:
            raise ConflictException("This order is not paid with mobile money")
        if payment.status not in (PaymentStatus.PENDING, PaymentStatus.FAILED):
            raise ConflictException("Payment already completed for this order")

        reference = charge_reference("MM", order.id)
        gateway = paystack.initialize_transaction(
            current_user.email,
            payment.amount,
            reference,
            metadata={"order_id": order.id, "order_number": order.order_number, "payment_type": "mobile_money"},
            channels=["mobile_money"],
        )

        payment.transaction_ref = gateway.get("reference", reference)
        payment.status = PaymentStatus.PENDING
        payment.updated_at = datetime.now(timezone.utc)
        session.add(payment)
        session.commit()
        session.refresh(payment)

        logging.info(f"PAYMENT >>> Mobile money checkout opened for order {order.order_number}")
        return ok(PaymentInitialized(
            authorization_url=gateway["authorization_url"],
            access_code=gateway.get("access_code"),
            reference=payment.transaction_ref,
            payment_id=payment.id,
            amount=payment.amount,
        ), "Payment initialized successfully")

    def initialize_payday_flex(
        self,
        data: PaydayFlexInitialize,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
        paystack: PaystackClient = Depends(get_paystack),
    ):
        order, payment = self._owned_payment(session, data.order_id, current_user)
        if payment.method != PaymentMethod.INSTALLMENT:
            raise ConflictException("This order is not on a Payday Flex plan")
        if payment.status != PaymentStatus.PENDING or payment.paid_amount > 0:
            raise ConflictException("Payday Flex already initialized for this order")

        first_amount, second_amount = split_installments(payment.amount)
        reference = charge_reference("PAY", order.id)
        gateway = paystack.initialize_transaction(
            current_user.email,
            first_amount,
            reference,
            metadata={
                "order_id": order.id,
                "order_number": order.order_number,
                "payment_type": "payday_flex_first",
                "payday_date": data.payday_date.isoformat(),
            },
            channels=["card", "mobile_money"],
        )

        payment.installment_plan = True
        payment.first_amount = first_amount
        payment.second_amount = second_amount
        payment.payday_date = data.payday_date
        payment.transaction_ref = gateway.get("reference", reference)
        payment.updated_at = datetime.now(timezone.utc)
        session.add(payment)
        session.commit()
        session.refresh(payment)

        logging.info(f"PAYMENT >>> Payday Flex for {order.order_number}: {first_amount} now, {second_amount} on {data.payday_date}")
        return ok(PaymentInitialized(
            authorization_url=gateway["authorization_url"],
            access_code=gateway.get("access_code"),
            reference=payment.transaction_ref,
            payment_id=payment.id,
            amount=first_amount,
            schedule=InstallmentSchedule(first_amount=first_amount, second_amount=second_amount, payday_date=data.payday_date),
        ), "Payday Flex initialized successfully")

    def charge_second(self, session: Session = Depends(db_session), paystack: PaystackClient = Depends(get_paystack)):
        result = charge_due_installments(session=session, paystack=paystack, email_service=email_service)
        return ok(result, "Second installment charging completed")

    def verify_payment(
        self,
        background_tasks: BackgroundTasks,
        reference: str = Query(..., min_length=1),
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
        paystack: PaystackClient = Depends(get_paystack),
    ):
        transaction = None
        payment = find_charge_payment(session, reference)
        if not payment and reference.startswith(REFERENCE_PREFIX):
            transaction = paystack.verify_transaction(reference)
            payment = find_charge_payment(session, reference, transaction.get("metadata"))
        if not payment:
            raise NotFoundException("Payment record not found")
        order = session.get(Order, payment.order_id)
        if order.user_id != current_user.id:
            raise ForbiddenException("Access denied to this payment")

        if payment.last_settled_ref == reference:
            return ok(payment_read(payment), "Payment already verified")

        transaction = transaction or paystack.verify_transaction(reference)
        if transaction.get("status") != "success":
            raise ValidationException(f"Payment {transaction.get('status', 'not successful')}")

        authorization = transaction.get("authorization") or {}
        amount = from_pesewas(transaction.get("amount", 0))
        fully_paid = apply_successful_charge(
            session, payment, amount,
            authorization_code=authorization.get("authorization_code") if authorization.get("reusable", True) else None,
            customer_code=(transaction.get("customer") or {}).get("customer_code"),
            reference=reference,
        )
        session.commit()
        session.refresh(payment)

        email_service.send_payment_confirmation_email(current_user.email, order.order_number, amount, fully_paid, background_tasks)
        return ok(payment_read(payment), "Payment verified successfully")

    def get_payment(self, order_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        order = session.get(Order, order_id)
        if not order:
            raise NotFoundException("Order not found")
        is_owner_or_admin(current_user, order.user_id, "Access denied to this payment")

        payment = session.exec(select(Payment).where(Payment.order_id == order.id)).first()
        if not payment:
            raise NotFoundException("Payment not found")
        return ok(payment_read(payment))
