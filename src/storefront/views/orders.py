"""Order history page state."""

from protean.exceptions import ObjectNotFoundError

from storefront.ordering.history import load_order_history, load_order_items
from storefront.ordering.order import Order, OrderItem
from storefront.views.feedback import reporting


class OrderHistoryView:
    def __init__(self, user) -> None:
        self.user = user
        self.orders: list[Order] = []
        self.loading = False
        self.error: str | None = None

    def load(self) -> None:
        if self.user is None:
            self.orders = []
            return

        self.loading = True
        try:
            with reporting(self, "order_history_failed", user_id=str(self.user.id)):
                self.orders = load_order_history(self.user.id)
        finally:
            self.loading = False

    def items_of(self, order_id) -> list[OrderItem]:
        if not any(str(order.id) == str(order_id) for order in self.orders):
            raise ObjectNotFoundError(f"Order with id {order_id} does not exist")
        with reporting(self, "order_items_failed", order_id=str(order_id)):
            return load_order_items(order_id)
