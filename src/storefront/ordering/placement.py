"""Order placement: command and handler.

Submitting a cart is two writes against the backend: the order header, then
one `order_items` row per cart line. The backend offers no transaction across
the two, so a failed item insert is followed by deleting the header it
belongs to. Either both land or neither stays behind.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Text

from storefront.backend import get_backend
from storefront.backend.port import ORDER_ITEMS, ORDERS, BackendError, eq
from storefront.catalogue.listing import load_products
from storefront.domain import storefront
from storefront.ordering.cart import Cart
from storefront.ordering.order import Order, OrderStatus
from storefront.ordering.pricing import cart_total, price_list

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    user_id = Identifier(required=True)
    cart = Text(required=True)  # JSON object: product id -> quantity


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = Cart(lines=command.cart)
        if cart.is_empty():
            raise ValidationError({"cart": ["Your cart is empty"]})

        quantities = cart.quantities()
        prices = price_list(load_products(quantities))
        missing = sorted(set(quantities) - set(prices))
        if missing:
            raise ValidationError({"cart": [f"Product {product_id} is no longer available" for product_id in missing]})

        total = cart_total(quantities, prices)
        backend = get_backend()

        rows = backend.insert(
            ORDERS,
            [
                {
                    "user_id": str(command.user_id),
                    "total_amount": float(total),
                    "status": OrderStatus.COMPLETED.value,
                }
            ],
        )
        if not rows:
            raise BackendError("Failed to create order")
        order = Order.from_row(rows[0])
        order_id = str(order.id)

        items = [
            {
                "order_id": order_id,
                "product_id": product_id,
                "quantity": quantity,
                "price_at_purchase": float(prices[product_id]),
            }
            for product_id, quantity in quantities.items()
        ]
        try:
            backend.insert(ORDER_ITEMS, items)
        except BackendError as exc:
            logger.warning("order_items_failed", order_id=order_id, error=exc.message)
            self._discard_header(backend, order_id)
            raise

        logger.info(
            "order_placed",
            order_id=order_id,
            user_id=str(command.user_id),
            total_amount=str(total),
            line_count=len(items),
        )
        return order_id

    @staticmethod
    def _discard_header(backend, order_id):
        try:
            backend.delete(ORDERS, [eq("id", order_id)])
        except BackendError as exc:
            logger.error("order_cleanup_failed", order_id=order_id, error=exc.message)
