from datetime import datetime, timedelta
from typing import Dict, List, Optional

from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.order_status import OrderStatus
from thrifthub.utils.dates import as_utc, utcnow

DELIVERY_FLOW = [
    DeliveryStatus.PENDING,
    DeliveryStatus.ASSIGNED,
    DeliveryStatus.PICKED_UP,
    DeliveryStatus.IN_TRANSIT,
    DeliveryStatus.DELIVERED,
]

TERMINAL_DELIVERY_STATUSES = {DeliveryStatus.DELIVERED, DeliveryStatus.FAILED}

STAGE_LABELS = {
    DeliveryStatus.PENDING: "Order placed",
    DeliveryStatus.ASSIGNED: "Rider assigned",
    DeliveryStatus.PICKED_UP: "Picked up",
    DeliveryStatus.IN_TRANSIT: "On the way",
    DeliveryStatus.DELIVERED: "Delivered",
}

# Order status driven by each delivery status change
ORDER_STATUS_FOR_DELIVERY = {
    DeliveryStatus.PICKED_UP: OrderStatus.OUT_FOR_DELIVERY,
    DeliveryStatus.IN_TRANSIT: OrderStatus.OUT_FOR_DELIVERY,
    DeliveryStatus.DELIVERED: OrderStatus.DELIVERED,
    DeliveryStatus.FAILED: OrderStatus.CANCELLED,
}


def is_terminal(status: DeliveryStatus) -> bool:
    return status in TERMINAL_DELIVERY_STATUSES


def can_transition(current: DeliveryStatus, target: DeliveryStatus) -> bool:
    """Forward moves only (skips allowed); failed from any open state."""
    if is_terminal(current):
        return False
    if target == DeliveryStatus.FAILED:
        return True
    return DELIVERY_FLOW.index(target) > DELIVERY_FLOW.index(current)


def estimate_arrival(status: DeliveryStatus, assigned_at: Optional[datetime], now: Optional[datetime] = None) -> Optional[datetime]:
    now = now or utcnow()
    assigned_at = as_utc(assigned_at)

    if status == DeliveryStatus.ASSIGNED and assigned_at:
        return assigned_at + timedelta(minutes=50)
    if status == DeliveryStatus.PICKED_UP and assigned_at:
        return assigned_at + timedelta(minutes=35)
    if status == DeliveryStatus.IN_TRANSIT:
        return now + timedelta(minutes=18)
    return None


def build_timeline(status: DeliveryStatus) -> List[Dict[str, str]]:
    if status == DeliveryStatus.FAILED:
        return [{"status": stage.value, "label": STAGE_LABELS[stage], "state": "failed"} for stage in DELIVERY_FLOW]

    position = DELIVERY_FLOW.index(status)
    timeline = []
    for index, stage in enumerate(DELIVERY_FLOW):
        if index < position or (index == position and stage == DeliveryStatus.DELIVERED):
            state = "completed"
        elif index == position:
            state = "current"
        else:
            state = "upcoming"
        timeline.append({"status": stage.value, "label": STAGE_LABELS[stage], "state": state})
    return timeline
