import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from thrifthub.client.api_client import ApiClient, ApiError
from thrifthub.client import notifications
from thrifthub.client.notifications import Notification, Notifier
from thrifthub.enums.order_status import OrderStatus

ORDER_STATUS_LABELS = {
    OrderStatus.PENDING: "Pending",
    OrderStatus.PROCESSING: "Processing",
    OrderStatus.OUT_FOR_DELIVERY: "Out for Delivery",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}


@dataclass
class BulkUpdateResult:
    status: OrderStatus
    successful: int = 0
    failed: int = 0
    failures: List[Tuple[int, str]] = field(default_factory=list)
    notification: Optional[Notification] = None


def summarize(result: BulkUpdateResult, single: bool) -> Notification:
    label = ORDER_STATUS_LABELS[result.status]
    if result.failed == 0:
        if single:
            return notifications.success(f"Status updated to {label}")
        return notifications.success(f"{result.successful} orders updated to {label}")
    if result.successful > 0:
        return notifications.warning(f"{result.successful} updated, {result.failed} failed")
    return notifications.error("Update failed")


class BulkOrderStatusUpdater:
    """
    Applies one status to many orders, one request at a time.

    Orders already updated stay updated when a later one fails, and a run
    cannot be cancelled once it has started.
    """

    def __init__(
        self,
        client: ApiClient,
        notify: Notifier = notifications.ignore,
        on_progress: Optional[Callable[[float], None]] = None,
        on_success: Optional[Callable[[], None]] = None,
    ):
        self.client = client
        self.notify = notify
        self.on_progress = on_progress
        self.on_success = on_success
        self.progress = 0.0
        self.is_updating = False

    def apply(
        self,
        order_ids: Sequence[int],
        status: Optional[str],
        current_status: Optional[str] = None,
    ) -> Optional[BulkUpdateResult]:
        if not status:
            self.notify(notifications.error("Select Status"))
            return None
        if not order_ids:
            self.notify(notifications.error("Select orders"))
            return None

        status = OrderStatus(status)
        single = len(order_ids) == 1
        if single and current_status is not None and OrderStatus(current_status) == status:
            self.notify(notifications.info("Status unchanged"))
            return None

        result = BulkUpdateResult(status=status)
        self.is_updating = True
        self.progress = 0.0
        try:
            for index, order_id in enumerate(order_ids, start=1):
                try:
                    self.client.update_order_status(order_id, status.value)
                    result.successful += 1
                except ApiError as e:
                    logging.error(f"ADMIN >>> Failed to update order {order_id}: {e}")
                    result.failed += 1
                    result.failures.append((order_id, e.message))

                self.progress = index / len(order_ids) * 100
                if self.on_progress:
                    self.on_progress(self.progress)
        finally:
            self.is_updating = False

        result.notification = summarize(result, single)
        self.notify(result.notification)
        self.progress = 0.0
        if self.on_success:
            self.on_success()
        return result
