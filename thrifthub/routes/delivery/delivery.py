import logging
from datetime import datetime, timezone
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session, select

from thrifthub.auth.auth import AuthRouter
from thrifthub.core.exceptions.app_exception import ConflictException, ForbiddenException, NotFoundException
from thrifthub.core.middlewares.internal import require_internal_key
from thrifthub.core.middlewares.users import is_rider
from thrifthub.core.responses.envelope import ApiResponse, ok
from thrifthub.database.connection import get_session
from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.order_status import TERMINAL_ORDER_STATUSES
from thrifthub.enums.user_role import UserRole
from thrifthub.helpers.delivery.assignment import find_available_rider
from thrifthub.helpers.delivery.lifecycle import ORDER_STATUS_FOR_DELIVERY, can_transition
from thrifthub.helpers.order.presenters import delivery_read, tracking_read
from thrifthub.models.delivery.delivery import Delivery
from thrifthub.models.delivery.rider import Rider
from thrifthub.models.order.order import Order
from thrifthub.models.user.user import User
from thrifthub.schemas.delivery.delivery import AssignRequest, DeliveryRead, DeliveryStatusUpdate, RiderDeliveryRead, TrackingRead

db_session = get_session
get_current_user = AuthRouter().get_current_user


def rider_for_user(session: Session, user: User) -> Rider:
    is_rider(user)
    rider = session.exec(select(Rider).where(Rider.user_id == user.id)).first()
    if not rider:
        raise NotFoundException("Rider profile not found")
    return rider


class DeliveryRouter(APIRouter):
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.add_api_route("/deliveries/track/{order_id}", self.track, methods=["GET"], response_model=ApiResponse[TrackingRead])
        self.add_api_route(
            "/deliveries/assign", self.assign, methods=["POST"],
            response_model=ApiResponse[TrackingRead], dependencies=[Depends(require_internal_key)],
        )
        self.add_api_route("/deliveries/rider", self.rider_deliveries, methods=["GET"], response_model=ApiResponse[List[RiderDeliveryRead]])
        self.add_api_route("/deliveries/{delivery_id}/status", self.update_status, methods=["PATCH"], response_model=ApiResponse[DeliveryRead])

    def track(self, order_id: int, current_user: User = Depends(get_current_user), session: Session = Depends(db_session)):
        order = session.get(Order, order_id)
        if not order:
            raise NotFoundException("Order not found")

        delivery = session.exec(select(Delivery).where(Delivery.order_id == order.id)).first()
        allowed = current_user.role == UserRole.ADMIN or order.user_id == current_user.id
        if not allowed and delivery and delivery.rider_id and current_user.role == UserRole.RIDER:
            rider = session.get(Rider, delivery.rider_id)
            allowed = rider is not None and rider.user_id == current_user.id
        if not allowed:
            raise ForbiddenException("Access denied")

        if not delivery:
            raise NotFoundException("Delivery tracking not available for this order")
        return ok(tracking_read(session, order, delivery))

    def assign(self, data: AssignRequest, session: Session = Depends(db_session)):
        order = session.get(Order, data.order_id)
        if not order:
            raise NotFoundException("Order not found")
        delivery = session.exec(select(Delivery).where(Delivery.order_id == order.id)).first()
        if not delivery:
            raise NotFoundException("Delivery not found for this order")
        if delivery.status != DeliveryStatus.PENDING:
            raise ConflictException("Delivery already assigned")

        rider = find_available_rider(session, delivery.zone_id)
        if not rider:
            raise NotFoundException("No available riders in this zone or adjacent zones")

        now = datetime.now(timezone.utc)
        delivery.rider_id = rider.id
        delivery.status = DeliveryStatus.ASSIGNED
        delivery.assigned_at = now
        delivery.updated_at = now
        rider.total_deliveries += 1
        rider.updated_at = now
        session.add(delivery)
        session.add(rider)
        session.commit()
        session.refresh(delivery)

        logging.info(f"DELIVERY >>> Order {order.order_number} assigned to rider {rider.id}")
        return ok(tracking_read(session, order, delivery), "Rider assigned successfully")

    def rider_deliveries(
        self,
        status: Optional[DeliveryStatus] = None,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
    ):
        rider = rider_for_user(session, current_user)
        query = select(Delivery).where(Delivery.rider_id == rider.id)
        if status:
            query = query.where(Delivery.status == status)
        deliveries = session.exec(query.order_by(Delivery.assigned_at.desc(), Delivery.id.desc())).all()

        result = []
        for delivery in deliveries:
            order = session.get(Order, delivery.order_id)
            customer = session.get(User, order.user_id)
            data = delivery_read(delivery).model_dump()
            data.update(
                order_number=order.order_number,
                total_amount=order.total_amount,
                customer_name=customer.full_name,
                customer_phone=customer.phone,
            )
            result.append(RiderDeliveryRead.model_validate(data))
        return ok(result)

    def update_status(
        self,
        delivery_id: int,
        data: DeliveryStatusUpdate,
        current_user: User = Depends(get_current_user),
        session: Session = Depends(db_session),
    ):
        rider = rider_for_user(session, current_user)
        delivery = session.get(Delivery, delivery_id)
        if not delivery:
            raise NotFoundException("Delivery not found")
        if delivery.rider_id != rider.id:
            raise ForbiddenException("This delivery is not assigned to you")
        if not can_transition(delivery.status, data.status):
            raise ConflictException(f"Cannot move delivery from {delivery.status.value} to {data.status.value}")

        now = datetime.now(timezone.utc)
        delivery.status = data.status
        delivery.updated_at = now
        if data.status == DeliveryStatus.DELIVERED:
            delivery.delivered_at = now
        session.add(delivery)

        order = session.get(Order, delivery.order_id)
        order_status = ORDER_STATUS_FOR_DELIVERY.get(data.status)
        if order_status and order.status not in TERMINAL_ORDER_STATUSES:
            order.status = order_status
            order.updated_at = now
            session.add(order)

        session.commit()
        session.refresh(delivery)

        logging.info(f"DELIVERY >>> Delivery {delivery.id} is now {delivery.status.value}")
        return ok(delivery_read(delivery), "Delivery status updated")
