"""Product aggregate: a catalog entry as the backend stores it."""

import math

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront
from storefront.utils.rows import parse_timestamp, pick


# Ten digits with two decimals, as the products.price column holds
MAX_PRICE = 99_999_999.99


def check_price(price) -> None:
    """Refuse NaN, infinities and anything the price column cannot hold."""
    if price is None:
        return
    if not math.isfinite(price) or not 0 <= price <= MAX_PRICE:
        raise ValidationError({"price": [f"Price must be between 0 and {MAX_PRICE:,.2f}"]})


@storefront.aggregate
class Product:
    id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0, max_value=MAX_PRICE)
    stock_quantity = Integer(default=0, min_value=0)
    category = String(max_length=100)
    image_url = String(max_length=500)
    created_by = Identifier()
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def from_row(cls, row):
        data = pick(row, "id", "name", "description", "price", "stock_quantity", "category", "image_url", "created_by")
        return cls(
            **data,
            created_at=parse_timestamp(row.get("created_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    @invariant.post
    def price_must_be_finite(self):
        check_price(self.price)

    def matches(self, search_term="", category=""):
        """Case-insensitive search over name and description, ANDed with an exact category."""
        if search_term:
            needle = search_term.lower()
            if needle not in (self.name or "").lower() and needle not in (self.description or "").lower():
                return False
        if category and self.category != category:
            return False
        return True
