"""Pricing: derives money amounts from carts and price lists.

Pure functions over Decimal. Prices come back from the backend as floats, so
they are converted through their shortest string form before any arithmetic;
`Decimal(19.99)` would otherwise carry the binary approximation along. Unit
prices stay exact; only line and cart totals are rounded to cents.
"""

from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

CENTS = Decimal("0.01")

# Far above any real order, far below what Decimal can quantize to cents
MAX_AMOUNT = Decimal("1e15")


def to_decimal(value) -> Decimal:
    """Exact Decimal for a price or amount; infinities, NaN and absurd magnitudes are refused."""
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, float):
        amount = Decimal(str(value))
    else:
        amount = Decimal(value)
    if not amount.is_finite() or abs(amount) >= MAX_AMOUNT:
        raise ValidationError({"price": [f"{value} is not a usable amount of money"]})
    return amount


def to_money(value) -> Decimal:
    return to_decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


def price_list(products: Iterable) -> dict[str, Decimal]:
    """Map product id to exact unit price for anything with `id` and `price`."""
    return {str(p.id): to_decimal(p.price or 0) for p in products}


def line_total(quantity: int, unit_price) -> Decimal:
    return to_money(to_decimal(unit_price) * quantity)


def cart_total(quantities: Mapping[str, int], prices: Mapping[str, Decimal]) -> Decimal:
    """Sum quantity x price over the cart. Products missing from `prices` add nothing."""
    total = sum(
        (line_total(quantity, prices[product_id]) for product_id, quantity in quantities.items() if product_id in prices),
        Decimal("0"),
    )
    return to_money(total)
