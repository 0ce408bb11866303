"""Cart value object: the shopper's selection while browsing the catalog.

The cart lives in page state only. It is never persisted: it starts empty
when the catalog opens and is dropped after checkout or when the shopper
leaves. Each mutation returns a new cart.
"""

import json

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Text

from storefront.domain import storefront
from storefront.ordering.pricing import cart_total, price_list


@storefront.value_object
class Cart:
    lines = Text(default="{}")  # JSON object: product id -> quantity

    @invariant.post
    def quantities_must_be_positive(self):
        try:
            lines = json.loads(self.lines or "{}")
        except (json.JSONDecodeError, TypeError):
            raise ValidationError({"lines": ["Cart lines must be valid JSON"]}) from None

        if not isinstance(lines, dict):
            raise ValidationError({"lines": ["Cart lines must be a JSON object"]})
        for product_id, quantity in lines.items():
            if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
                raise ValidationError({"lines": [f"Quantity for '{product_id}' must be a positive integer"]})

    @classmethod
    def empty(cls):
        return cls(lines="{}")

    @classmethod
    def of(cls, quantities):
        return cls(lines=json.dumps({str(k): v for k, v in quantities.items()}, sort_keys=True))

    def quantities(self) -> dict[str, int]:
        return json.loads(self.lines or "{}")

    def add(self, product_id):
        """One more of `product_id`. There is no cap against stock."""
        quantities = self.quantities()
        key = str(product_id)
        quantities[key] = quantities.get(key, 0) + 1
        return Cart.of(quantities)

    def quantity_of(self, product_id) -> int:
        return self.quantities().get(str(product_id), 0)

    def product_ids(self) -> list[str]:
        return list(self.quantities())

    def is_empty(self) -> bool:
        return not self.quantities()

    @property
    def line_count(self):
        return len(self.quantities())

    @property
    def item_count(self):
        return sum(self.quantities().values())

    def total(self, products):
        quantities = self.quantities()
        return cart_total(quantities, price_list(p for p in products if str(p.id) in quantities))
