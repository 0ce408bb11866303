"""Order history queries."""

from storefront.backend import get_backend
from storefront.backend.port import ORDER_ITEMS, ORDERS, eq
from storefront.ordering.order import Order, OrderItem


def load_order_history(user_id) -> list[Order]:
    """The user's orders, newest first."""
    rows = get_backend().select(ORDERS, [eq("user_id", str(user_id))], order_by="created_at", descending=True)
    return [Order.from_row(row) for row in rows]


def load_order_items(order_id) -> list[OrderItem]:
    rows = get_backend().select(ORDER_ITEMS, [eq("order_id", str(order_id))])
    return [OrderItem.from_row(row) for row in rows]
