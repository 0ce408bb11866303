"""Routes and typed navigation results.

View models never drive a router themselves. They return a Redirect and the
caller decides how to follow it.
"""

from dataclasses import dataclass
from decimal import Decimal

from storefront.ordering.cart import Cart

HOME = "/"
LOGIN = "/login"
SIGNUP = "/signup"
DASHBOARD = "/dashboard"
CHECKOUT = "/checkout"
ORDERS = "/orders"
PROFILE = "/profile"
ADMIN = "/admin"

# Delay before following a redirect after a success message
SUCCESS_REDIRECT_DELAY = 2.0


@dataclass(frozen=True)
class Redirect:
    path: str
    delay_seconds: float = 0.0


@dataclass(frozen=True)
class CheckoutTransition:
    """What the catalog hands to checkout: the cart and the total it showed."""

    cart: Cart
    total: Decimal


def home_route_for(user) -> str:
    if user is None:
        return LOGIN
    return ADMIN if user.is_admin else DASHBOARD
