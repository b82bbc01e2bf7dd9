import logging
import time
from datetime import datetime
from typing import Callable, Optional

from thrifthub.client.api_client import ApiClient, ApiError
from thrifthub.client import notifications
from thrifthub.client.notifications import STATUS_NOTIFICATIONS, Notifier
from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.helpers.delivery.lifecycle import is_terminal
from thrifthub.utils.dates import utcnow

POLL_INTERVAL_SECONDS = 30

LOGIN_PATH = "/login"
ORDERS_PATH = "/orders"

TRACKING_UNAVAILABLE = "Delivery tracking not available for this order"
TRACKING_LOAD_FAILED = "Failed to load tracking information"


def stay(path: str):
    pass


class DeliveryTracker:
    """
    Polls the tracking endpoint of one order until its delivery settles.

    A notification is emitted each time the fetched status differs from the
    previously observed one; the first fetch only records the status. Polling
    stops on `delivered`/`failed`, on 401/403/404 answers, or on `stop()`.
    """

    def __init__(
        self,
        client: ApiClient,
        order_id: int,
        notify: Notifier = notifications.ignore,
        redirect: Callable[[str], None] = stay,
        sleep: Callable[[float], None] = time.sleep,
        interval: float = POLL_INTERVAL_SECONDS,
    ):
        self.client = client
        self.order_id = order_id
        self.notify = notify
        self.redirect = redirect
        self.sleep = sleep
        self.interval = interval

        self.tracking: Optional[dict] = None
        self.previous_status: Optional[DeliveryStatus] = None
        self.last_updated: Optional[datetime] = None
        self.error: Optional[str] = None
        self.is_polling = False
        self._stopped = False

    @property
    def status(self) -> Optional[DeliveryStatus]:
        return self.previous_status

    def poll_once(self, initial: bool = False) -> Optional[dict]:
        self.error = None
        try:
            tracking = self.client.get_tracking(self.order_id)
        except ApiError as e:
            self._handle_error(e, initial)
            return None

        new_status = DeliveryStatus(tracking["status"])
        if self.previous_status is not None and new_status != self.previous_status:
            logging.info(f"TRACKING >>> Order {self.order_id}: {self.previous_status.value} -> {new_status.value}")
            self.notify(STATUS_NOTIFICATIONS[new_status])

        self.previous_status = new_status
        self.tracking = tracking
        self.last_updated = utcnow()

        if is_terminal(new_status):
            self.is_polling = False
        return tracking

    def _handle_error(self, e: ApiError, initial: bool):
        if e.status_code == 401:
            self.is_polling = False
            self.notify(notifications.error("Session expired. Please login again"))
            self.redirect(LOGIN_PATH)
        elif e.status_code == 404:
            self.is_polling = False
            self.error = TRACKING_UNAVAILABLE
            self.notify(notifications.error(TRACKING_UNAVAILABLE))
        elif e.status_code == 403:
            self.is_polling = False
            self.notify(notifications.error("Access denied"))
            self.redirect(ORDERS_PATH)
        else:
            logging.error(f"TRACKING >>> Error fetching tracking for order {self.order_id}: {e}")
            # Background polls fail quietly; the next tick or refresh() retries
            if initial:
                self.error = TRACKING_LOAD_FAILED
                self.notify(notifications.error(TRACKING_LOAD_FAILED))

    def refresh(self) -> Optional[dict]:
        tracking = self.poll_once()
        if tracking is not None:
            self.notify(notifications.success("Tracking information refreshed"))
        return tracking

    def run(self) -> Optional[dict]:
        """Initial fetch, then one fetch per interval while polling is on."""
        self._stopped = False
        self.is_polling = True
        self.poll_once(initial=True)

        while self.is_polling and not self._stopped:
            self.sleep(self.interval)
            if self._stopped:
                break
            self.poll_once()

        return self.tracking

    def stop(self):
        self._stopped = True
        self.is_polling = False
