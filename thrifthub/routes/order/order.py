import logging
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, NotFoundException
from thrifthub.core.middlewares.users import is_owner_or_admin
from thrifthub.core.responses.envelope import ApiResponse, Pagination, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.order_status import OrderStatus
from thrifthub.enums.payment_method import PaymentMethod
from thrifthub.enums.payment_status import PaymentStatus
from thrifthub.helpers.order.presenters import order_read, order_summary
from thrifthub.helpers.payment.payday_flex import to_money
from thrifthub.models.campus.campus_zone import CampusZone
from thrifthub.models.cart.cart import Cart
from thrifthub.models.delivery.delivery import Delivery
from thrifthub.models.order.order import Order
from thrifthub.models.order.order_item import OrderItem
from thrifthub.models.payment.payment import Payment
from thrifthub.models.user.user import User
from thrifthub.schemas.order.order import OrderCreate, OrderRead, OrderSummary

db_session = get_session
get_current_user = AuthRouter().get_current_user


class OrderRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/orders", self.get_my_orders, methods=["GET"], response_model=ApiResponse[List[OrderSummary]])
        self.add_api_route("/orders", self.create_order, methods=["POST"], response_model=ApiResponse[OrderRead], status_code=201)
        self.add_api_route("/orders/{order_id}", self.get_order, methods=["GET"], response_model=ApiResponse[OrderRead])

    def get_my_orders(
        self,
        status: Optional[OrderStatus] = None,
        page: int = Query(1, ge=1),
        limit: int = Query(10, ge=1, le=100),
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
    ):
        filters = [Order.user_id == current_user.id]
        if status:
            filters.append(Order.status == status)

        total = session.exec(select(func.count()).select_from(Order).where(*filters)).one()
        orders = session.exec(
            select(Order).where(*filters).order_by(Order.created_at.desc(), Order.id.desc()).offset((page - 1) * limit).limit(limit)
        ).all()
        return ok([order_summary(session, order) for order in orders], pagination=Pagination.build(total, page, limit))

    def get_order(self, order_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        order = session.get(Order, order_id)
        if not order:
            raise NotFoundException("Order not found")
        is_owner_or_admin(current_user, order.user_id, "Access denied to this order")
        return ok(order_read(session, order))

    def create_order(self, data: OrderCreate, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        cart = session.exec(select(Cart).where(Cart.user_id == current_user.id)).first()
        if not cart or not cart.items:
            raise ConflictException("Cart is empty")

        zone = session.exec(select(CampusZone).where(CampusZone.code == data.campus_zone)).first()
        if not zone:
            raise NotFoundException("Campus zone not found")

        try:
            subtotal = Decimal("0.00")
            lines = []
            for cart_item in cart.items:
                product = cart_item.product
                if not product or not product.is_active:
                    raise ConflictException("A product in your cart is no longer available")
                if cart_item.quantity > product.stock:
                    raise ConflictException(f"Insufficient stock for '{product.title}'")
                unit_price = to_money(product.price)
                subtotal += unit_price * cart_item.quantity
                lines.append((cart_item, product, unit_price))

            delivery_fee = to_money(zone.delivery_fee)
            total = subtotal + delivery_fee

            order = Order(
                user_id=current_user.id,
                subtotal=subtotal,
                delivery_fee=delivery_fee,
                total_amount=total,
                delivery_address=data.delivery_address.strip(),
                campus_zone=zone.code,
                status=OrderStatus.PENDING,
            )
            session.add(order)
            session.flush()

            for cart_item, product, unit_price in lines:
                session.add(OrderItem(order_id=order.id, product_id=product.id, quantity=cart_item.quantity, unit_price=unit_price))
                product.stock -= cart_item.quantity
                session.add(product)
                session.delete(cart_item)

            session.add(Payment(
                order_id=order.id,
                method=data.payment_method,
                status=PaymentStatus.PENDING,
                amount=total,
                paid_amount=Decimal("0.00"),
                remaining_amount=total,
                installment_plan=data.payment_method == PaymentMethod.INSTALLMENT,
            ))
            session.add(Delivery(
                order_id=order.id,
                zone_id=zone.id,
                delivery_address=order.delivery_address,
                status=DeliveryStatus.PENDING,
            ))
            session.commit()
        except Exception:
            session.rollback()
            raise

        session.refresh(order)
        logging.info(f"ORDER >>> Order {order.order_number} created for user {current_user.id}, total {total}")
        return ok(order_read(session, order), "Order created")
