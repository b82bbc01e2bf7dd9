import json
from decimal import Decimal

import httpx
import pytest

from thrifthub.client.admin import BulkOrderStatusUpdater
from thrifthub.client.api_client import ApiClient, ApiError
from thrifthub.client.optimistic import CartStore, RiderAvailabilityToggle
from thrifthub.client.tracking import TRACKING_UNAVAILABLE, DeliveryTracker
from thrifthub.enums.delivery_status import DeliveryStatus
from thrifthub.enums.notification_level import NotificationLevel


def envelope(data, status_code=200):
    return httpx.Response(status_code, json={"success": True, "data": data})


def failure(status_code, code="ERROR", message="Request failed"):
    return httpx.Response(status_code, json={"success": False, "error": {"code": code, "message": message}})


class ScriptedApi:
    """Serves queued responses in order and records every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        return response() if callable(response) else response

    def client(self):
        return ApiClient(base_url="http://api.test", access_token="token", transport=httpx.MockTransport(self))


def tracking(status):
    return envelope({"order_id": 7, "status": status})


class Recorder:
    def __init__(self):
        self.notifications = []
        self.redirects = []
        self.sleeps = []

    def notify(self, notification):
        self.notifications.append(notification)

    def redirect(self, path):
        self.redirects.append(path)

    def sleep(self, seconds):
        self.sleeps.append(seconds)

    def messages(self):
        return [n.message for n in self.notifications]


def make_tracker(api, recorder, **kwargs):
    return DeliveryTracker(api.client(), 7, notify=recorder.notify, redirect=recorder.redirect, sleep=recorder.sleep, **kwargs)


# ApiClient

def test_api_client_unwraps_envelope_and_sends_token():
    api = ScriptedApi(envelope({"id": 1}))

    assert api.client().get("/cart") == {"id": 1}
    assert api.requests[0].headers["Authorization"] == "Bearer token"


def test_api_client_raises_api_error():
    api = ScriptedApi(failure(409, "CONFLICT", "Order is already delivered"))

    with pytest.raises(ApiError) as excinfo:
        api.client().update_order_status(3, "processing")

    assert (excinfo.value.status_code, excinfo.value.code, excinfo.value.message) == (409, "CONFLICT", "Order is already delivered")
    assert json.loads(api.requests[0].content) == {"status": "processing"}


def test_api_client_network_error():
    def unreachable(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = ApiClient(base_url="http://api.test", transport=httpx.MockTransport(unreachable))

    with pytest.raises(ApiError) as excinfo:
        client.get_cart()
    assert excinfo.value.code == "NETWORK_ERROR"


# DeliveryTracker

def test_tracker_notifies_once_per_change_and_stops_when_delivered():
    api = ScriptedApi(
        tracking("pending"), tracking("assigned"), tracking("assigned"),
        tracking("picked_up"), tracking("in_transit"), tracking("delivered"),
    )
    recorder = Recorder()
    tracker = make_tracker(api, recorder)

    tracker.run()

    assert recorder.messages() == [
        "Rider has been assigned to your order!",
        "Your order has been picked up!",
        "Your order is on the way!",
        "Your order has been delivered!",
    ]
    assert len(api.requests) == 6
    assert recorder.sleeps == [30] * 5
    assert tracker.status == DeliveryStatus.DELIVERED
    assert tracker.is_polling is False


def test_tracker_first_fetch_of_terminal_status_does_not_poll():
    api = ScriptedApi(tracking("failed"))
    recorder = Recorder()

    make_tracker(api, recorder).run()

    assert len(api.requests) == 1
    assert recorder.notifications == []
    assert recorder.sleeps == []


def test_tracker_failed_delivery_is_an_error_notification():
    api = ScriptedApi(tracking("in_transit"), tracking("failed"))
    recorder = Recorder()

    make_tracker(api, recorder).run()

    assert recorder.notifications[-1].level == NotificationLevel.ERROR
    assert recorder.notifications[-1].message == "Delivery attempt failed. Contact support."


def test_tracker_stop_ends_the_loop():
    api = ScriptedApi(tracking("in_transit"))
    recorder = Recorder()
    tracker = make_tracker(api, recorder)

    def sleep_then_stop(seconds):
        recorder.sleep(seconds)
        if len(recorder.sleeps) == 2:
            tracker.stop()

    tracker.sleep = sleep_then_stop
    tracker.run()

    assert len(api.requests) == 2
    assert tracker.is_polling is False


def test_tracker_session_expired_redirects_to_login():
    api = ScriptedApi(tracking("assigned"), failure(401, "UNAUTHORIZED"))
    recorder = Recorder()

    make_tracker(api, recorder).run()

    assert recorder.redirects == ["/login"]
    assert recorder.messages() == ["Session expired. Please login again"]
    assert len(api.requests) == 2


def test_tracker_access_denied_redirects_to_orders():
    api = ScriptedApi(failure(403, "FORBIDDEN"))
    recorder = Recorder()

    tracker = make_tracker(api, recorder)
    tracker.run()

    assert recorder.redirects == ["/orders"]
    assert tracker.is_polling is False


def test_tracker_not_found_stops_with_error():
    api = ScriptedApi(failure(404, "NOT_FOUND"))
    recorder = Recorder()
    tracker = make_tracker(api, recorder)

    tracker.run()

    assert tracker.error == TRACKING_UNAVAILABLE
    assert tracker.is_polling is False
    assert recorder.redirects == []


def test_tracker_keeps_polling_after_server_error():
    api = ScriptedApi(tracking("assigned"), failure(500, "INTERNAL_SERVER_ERROR"), tracking("delivered"))
    recorder = Recorder()

    make_tracker(api, recorder).run()

    assert len(api.requests) == 3
    assert recorder.messages() == ["Your order has been delivered!"]


def test_tracker_manual_refresh_retries():
    api = ScriptedApi(failure(500), tracking("assigned"))
    recorder = Recorder()
    tracker = make_tracker(api, recorder)

    assert tracker.poll_once(initial=True) is None
    assert recorder.messages() == ["Failed to load tracking information"]

    assert tracker.refresh()["status"] == "assigned"
    assert recorder.messages()[-1] == "Tracking information refreshed"


# BulkOrderStatusUpdater

def test_bulk_update_single_order():
    api = ScriptedApi(envelope({}))
    recorder = Recorder()

    result = BulkOrderStatusUpdater(api.client(), notify=recorder.notify).apply([11], "processing", current_status="pending")

    assert result.successful == 1
    assert recorder.notifications[0].level == NotificationLevel.SUCCESS
    assert recorder.messages() == ["Status updated to Processing"]


def test_bulk_update_runs_sequentially_with_progress():
    api = ScriptedApi(envelope({}))
    recorder = Recorder()
    progress = []
    finished = []

    updater = BulkOrderStatusUpdater(api.client(), notify=recorder.notify, on_progress=progress.append, on_success=lambda: finished.append(True))
    updater.apply([1, 2, 3], "delivered")

    assert [request.url.path for request in api.requests] == ["/admin/orders/1/status", "/admin/orders/2/status", "/admin/orders/3/status"]
    assert progress == pytest.approx([100 / 3, 200 / 3, 100.0])
    assert recorder.messages() == ["3 orders updated to Delivered"]
    assert finished == [True]
    assert updater.progress == 0.0


def test_bulk_update_partial_failure_keeps_successes():
    api = ScriptedApi(envelope({}), failure(409, "CONFLICT", "Order is already delivered"), envelope({}))
    recorder = Recorder()

    result = BulkOrderStatusUpdater(api.client(), notify=recorder.notify).apply([1, 2, 3], "cancelled")

    assert (result.successful, result.failed) == (2, 1)
    assert result.failures == [(2, "Order is already delivered")]
    assert recorder.notifications[0].level == NotificationLevel.WARNING
    assert recorder.messages() == ["2 updated, 1 failed"]


def test_bulk_update_all_failed():
    api = ScriptedApi(failure(500))
    recorder = Recorder()

    BulkOrderStatusUpdater(api.client(), notify=recorder.notify).apply([1, 2], "processing")

    assert recorder.notifications[0].level == NotificationLevel.ERROR
    assert recorder.messages() == ["Update failed"]


def test_bulk_update_guards():
    api = ScriptedApi(envelope({}))
    recorder = Recorder()
    finished = []
    updater = BulkOrderStatusUpdater(api.client(), notify=recorder.notify, on_success=lambda: finished.append(True))

    assert updater.apply([1, 2], "") is None
    assert updater.apply([], "processing") is None
    assert updater.apply([1], "processing", current_status="processing") is None

    assert recorder.messages() == ["Select Status", "Select orders", "Status unchanged"]
    assert recorder.notifications[1].level == NotificationLevel.ERROR
    assert recorder.notifications[2].level == NotificationLevel.INFO
    assert api.requests == []
    assert finished == []


# Optimistic updates

CART = {
    "id": 1,
    "items": [
        {"id": 10, "product_id": 3, "quantity": 1, "subtotal": 25.5, "product": {"id": 3, "title": "Kente shirt", "price": 25.5}},
        {"id": 11, "product_id": 4, "quantity": 2, "subtotal": 20.0, "product": {"id": 4, "title": "Beads", "price": 10.0}},
    ],
    "total": 45.5,
    "total_items": 3,
}


def cart_with(quantity):
    items = [dict(CART["items"][0], quantity=quantity), CART["items"][1]]
    return dict(CART, items=items)


def test_cart_quantity_change_applies_server_cart():
    api = ScriptedApi(envelope(CART), envelope(cart_with(3)))
    store = CartStore(api.client()).load()

    assert store.update_quantity(10, 3) is True

    assert store.items[10].quantity == 3
    assert store.total == Decimal("96.50")
    assert store.total_items == 5
    assert json.loads(api.requests[1].content) == {"quantity": 3}


def test_cart_quantity_reverts_when_patch_fails():
    recorder = Recorder()
    api = ScriptedApi(envelope(CART))
    store = CartStore(api.client(), notify=recorder.notify).load()
    seen_during_request = []

    def out_of_stock():
        seen_during_request.append(store.items[10].quantity)
        return failure(409, "CONFLICT", "Only 1 item(s) of 'Kente shirt' in stock")

    api.responses = [out_of_stock]

    assert store.update_quantity(10, 4) is False

    assert seen_during_request == [4]
    assert store.items[10].quantity == 1
    assert store.total == Decimal("45.50")
    assert recorder.messages() == ["Only 1 item(s) of 'Kente shirt' in stock"]


def test_cart_rejects_unknown_item():
    store = CartStore(ScriptedApi(envelope(CART)).client()).load()

    with pytest.raises(KeyError):
        store.update_quantity(99, 1)


def test_rider_toggle_success():
    recorder = Recorder()
    api = ScriptedApi(envelope({"id": 5, "is_available": False}))

    toggle = RiderAvailabilityToggle(api.client(), 5, is_available=True, rider_name="Kofi", notify=recorder.notify)

    assert toggle.toggle() is True
    assert toggle.is_available is False
    assert recorder.messages() == ["Kofi is now offline"]
    assert json.loads(api.requests[0].content) == {"is_available": False}


def test_rider_toggle_reverts_on_failure():
    recorder = Recorder()
    api = ScriptedApi(failure(403, "FORBIDDEN", "Access denied"))

    toggle = RiderAvailabilityToggle(api.client(), 5, is_available=False, notify=recorder.notify)

    assert toggle.toggle() is False
    assert toggle.is_available is False
    assert toggle.is_updating is False
    assert recorder.messages() == ["Access denied"]


# Against the running API

def test_tracker_against_api(client, factory):
    user = factory.create_user()
    zone = factory.create_zone()
    rider = factory.create_rider(zone)
    order = factory.create_order(user, zone, rider=rider, delivery_status=DeliveryStatus.ASSIGNED)
    api = ApiClient(http_client=client)
    api.login(user.email, "secret123")
    recorder = Recorder()
    tracker = DeliveryTracker(api, order.id, notify=recorder.notify, sleep=recorder.sleep)

    tracker.poll_once(initial=True)
    delivery = factory.delivery_for(order)
    delivery.status = DeliveryStatus.PICKED_UP
    factory.session.add(delivery)
    factory.session.commit()
    tracker.poll_once()

    assert tracker.status == DeliveryStatus.PICKED_UP
    assert recorder.messages() == ["Your order has been picked up!"]
