"""Order aggregate and its line items, as read back from the backend."""

from decimal import Decimal
from enum import Enum

from protean.fields import DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront
from storefront.ordering.pricing import line_total, to_money
from storefront.utils.rows import parse_timestamp, pick


class OrderStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@storefront.value_object
class OrderItem:
    order_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    price_at_purchase = Float(required=True, min_value=0.0)

    @classmethod
    def from_row(cls, row):
        return cls(**pick(row, "order_id", "product_id", "quantity", "price_at_purchase"))

    @property
    def line_total(self) -> Decimal:
        return line_total(self.quantity, self.price_at_purchase)


@storefront.aggregate
class Order:
    id = Identifier(identifier=True, required=True)
    user_id = Identifier(required=True)
    total_amount = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    created_at = DateTime()

    @classmethod
    def from_row(cls, row):
        data = pick(row, "id", "user_id", "total_amount", "status")
        return cls(**data, created_at=parse_timestamp(row.get("created_at")))

    @property
    def total(self) -> Decimal:
        return to_money(self.total_amount)
