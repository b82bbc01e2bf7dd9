from typing import Optional
from sqlmodel import Session, select

from thrifthub.helpers.delivery.lifecycle import build_timeline, estimate_arrival
from thrifthub.helpers.payment.payday_flex import effective_status
from thrifthub.models.campus.campus_zone import CampusZone
from thrifthub.models.delivery.delivery import Delivery
from thrifthub.models.delivery.rider import Rider
from thrifthub.models.order.order import Order
from thrifthub.models.payment.payment import Payment
from thrifthub.models.product.product import Product
from thrifthub.models.user.user import User
from thrifthub.schemas.delivery.delivery import DeliveryRead, RiderInfo, TrackingRead
from thrifthub.schemas.order.order import OrderItemRead, OrderRead, OrderSummary
from thrifthub.schemas.payment.payment import PaymentRead
from thrifthub.schemas.product.product import ProductSummary


def product_summary(product: Product) -> ProductSummary:
    return ProductSummary(
        id=product.id,
        title=product.title,
        price=product.price,
        size=product.size,
        condition=product.condition,
        stock=product.stock,
        primary_image=product.primary_image,
        is_active=product.is_active,
    )


def payment_read(payment: Payment) -> PaymentRead:
    data = payment.model_dump()
    data["status"] = effective_status(payment)
    return PaymentRead.model_validate(data)


def delivery_read(delivery: Delivery) -> DeliveryRead:
    data = delivery.model_dump()
    data["estimated_arrival"] = estimate_arrival(delivery.status, delivery.assigned_at)
    return DeliveryRead.model_validate(data)


def rider_info(session: Session, rider_id: Optional[int]) -> Optional[RiderInfo]:
    if rider_id is None:
        return None
    rider = session.get(Rider, rider_id)
    if not rider:
        return None
    user = session.get(User, rider.user_id)
    zone = session.get(CampusZone, rider.zone_id)
    return RiderInfo(
        id=rider.id,
        name=user.full_name if user else "Rider",
        phone=user.phone if user else None,
        rating=rider.rating,
        zone_code=zone.code if zone else None,
        zone_name=zone.name if zone else None,
    )


def tracking_read(session: Session, order: Order, delivery: Delivery) -> TrackingRead:
    return TrackingRead(
        delivery_id=delivery.id,
        order_id=order.id,
        order_number=order.order_number,
        order_status=order.status,
        total_amount=order.total_amount,
        status=delivery.status,
        delivery_address=delivery.delivery_address,
        rider=rider_info(session, delivery.rider_id),
        assigned_at=delivery.assigned_at,
        delivered_at=delivery.delivered_at,
        estimated_arrival=estimate_arrival(delivery.status, delivery.assigned_at),
        timeline=build_timeline(delivery.status),
    )


def order_summary(session: Session, order: Order) -> OrderSummary:
    payment = session.exec(select(Payment).where(Payment.order_id == order.id)).first()
    delivery = session.exec(select(Delivery).where(Delivery.order_id == order.id)).first()
    return OrderSummary(
        id=order.id,
        order_number=order.order_number,
        status=order.status,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        total_amount=order.total_amount,
        campus_zone=order.campus_zone,
        items_count=sum(item.quantity for item in order.items),
        payment_status=effective_status(payment) if payment else None,
        delivery_status=delivery.status if delivery else None,
        created_at=order.created_at,
    )


def order_read(session: Session, order: Order) -> OrderRead:
    payment = session.exec(select(Payment).where(Payment.order_id == order.id)).first()
    delivery = session.exec(select(Delivery).where(Delivery.order_id == order.id)).first()

    items = []
    for item in order.items:
        items.append(OrderItemRead(
            id=item.id,
            product_id=item.product_id,
            title=item.product.title if item.product else None,
            image_url=item.product.primary_image if item.product else None,
            quantity=item.quantity,
            unit_price=item.unit_price,
            item_total=item.item_total,
        ))

    return OrderRead(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status,
        subtotal=order.subtotal,
        delivery_fee=order.delivery_fee,
        total_amount=order.total_amount,
        delivery_address=order.delivery_address,
        campus_zone=order.campus_zone,
        items=items,
        payment=payment_read(payment) if payment else None,
        delivery=delivery_read(delivery) if delivery else None,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )
