from typing import Callable, NamedTuple

from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.notification_level import NotificationLevel


class Notification(NamedTuple):
    level: NotificationLevel
    message: str


Notifier = Callable[[Notification], None]


def ignore(notification: Notification):
    pass


STATUS_NOTIFICATIONS = {
    DeliveryStatus.PENDING: Notification(NotificationLevel.INFO, "Delivery is being prepared"),
    DeliveryStatus.ASSIGNED: Notification(NotificationLevel.SUCCESS, "Rider has been assigned to your order!"),
    DeliveryStatus.PICKED_UP: Notification(NotificationLevel.SUCCESS, "Your order has been picked up!"),
    DeliveryStatus.IN_TRANSIT: Notification(NotificationLevel.SUCCESS, "Your order is on the way!"),
    DeliveryStatus.DELIVERED: Notification(NotificationLevel.SUCCESS, "Your order has been delivered!"),
    DeliveryStatus.FAILED: Notification(NotificationLevel.ERROR, "Delivery attempt failed. Contact support."),
}


def success(message: str) -> Notification:
    return Notification(NotificationLevel.SUCCESS, message)


def info(message: str) -> Notification:
    return Notification(NotificationLevel.INFO, message)


def warning(message: str) -> Notification:
    return Notification(NotificationLevel.WARNING, message)


def error(message: str) -> Notification:
    return Notification(NotificationLevel.ERROR, message)
