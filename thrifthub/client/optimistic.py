import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional

from thrifthub.client.api_client import ApiClient, ApiError
from thrifthub.client import notifications
from thrifthub.client.notifications import Notifier
from thrifthub.helpers.payment.payday_flex import to_money


@dataclass
class CartLine:
    id: int
    product_id: int
    title: str
    unit_price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


class CartStore:
    """Local cart mirror whose quantity edits show before the server confirms them."""

    def __init__(self, client: ApiClient, notify: Notifier = notifications.ignore):
        self.client = client
        self.notify = notify
        self.cart_id: Optional[int] = None
        self.items: Dict[int, CartLine] = {}

    @property
    def total(self) -> Decimal:
        return to_money(sum((line.subtotal for line in self.items.values()), Decimal("0")))

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.items.values())

    def load(self) -> "CartStore":
        self._apply(self.client.get_cart())
        return self

    def _apply(self, cart: dict):
        self.cart_id = cart["id"]
        self.items = {
            item["id"]: CartLine(
                id=item["id"],
                product_id=item["product_id"],
                title=item["product"]["title"],
                unit_price=to_money(item["product"]["price"]),
                quantity=item["quantity"],
            )
            for item in cart.get("items", [])
        }

    def update_quantity(self, item_id: int, quantity: int) -> bool:
        line = self.items.get(item_id)
        if line is None:
            raise KeyError(f"Cart item {item_id} is not in the cart")
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        previous = line.quantity
        line.quantity = quantity
        try:
            cart = self.client.update_cart_item(item_id, quantity)
        except ApiError as e:
            line.quantity = previous
            logging.warning(f"CART >>> Quantity update for item {item_id} reverted: {e}")
            self.notify(notifications.error(e.message or "Failed to update cart"))
            return False

        self._apply(cart)
        return True


class RiderAvailabilityToggle:
    """Online/offline switch for one rider, flipped locally before the PATCH."""

    def __init__(
        self,
        client: ApiClient,
        rider_id: int,
        is_available: bool,
        rider_name: Optional[str] = None,
        notify: Notifier = notifications.ignore,
    ):
        self.client = client
        self.rider_id = rider_id
        self.is_available = is_available
        self.rider_name = rider_name
        self.notify = notify
        self.is_updating = False

    def toggle(self) -> bool:
        previous = self.is_available
        self.is_available = not previous
        self.is_updating = True
        try:
            rider = self.client.set_rider_availability(self.rider_id, self.is_available)
        except ApiError as e:
            self.is_available = previous
            logging.warning(f"DELIVERY >>> Availability change for rider {self.rider_id} reverted: {e}")
            self.notify(notifications.error(e.message or "Failed to update availability"))
            return False
        finally:
            self.is_updating = False

        self.is_available = rider["is_available"]
        state = "online" if self.is_available else "offline"
        if self.rider_name:
            self.notify(notifications.success(f"{self.rider_name} is now {state}"))
        else:
            self.notify(notifications.success(f"Status updated to {state}"))
        return True
