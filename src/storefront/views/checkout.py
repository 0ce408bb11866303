"""Checkout page state.

    unsubmitted --submit()--> submitting --ok--> submitted
                                   |
                                   +--error--> unsubmitted

A submission can only start from `unsubmitted`, so a second click while the
first is in flight, or after it succeeded, never creates a second order.
"""

from enum import Enum

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.ordering.cart import Cart
from storefront.ordering.placement import PlaceOrder
from storefront.views.feedback import reporting
from storefront.views.navigation import DASHBOARD, ORDERS, SUCCESS_REDIRECT_DELAY, CheckoutTransition, Redirect

logger = structlog.get_logger(__name__)


class CheckoutState(Enum):
    UNSUBMITTED = "unsubmitted"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"


class CheckoutView:
    def __init__(self, user, transition: CheckoutTransition | None = None) -> None:
        self.user = user
        self.cart: Cart | None = transition.cart if transition else None
        self.total = transition.total if transition else None
        self.state = CheckoutState.UNSUBMITTED
        self.order_id: str | None = None
        self.error: str | None = None
        self.success: str | None = None

    @property
    def cart_is_empty(self) -> bool:
        return self.cart is None or self.cart.is_empty()

    def enter(self) -> Redirect | None:
        """Entering without a cart sends the shopper back to keep shopping."""
        if self.cart_is_empty and self.state is not CheckoutState.SUBMITTED:
            return Redirect(DASHBOARD)
        return None

    def submit(self) -> Redirect:
        if self.state is CheckoutState.SUBMITTING:
            raise ValidationError({"checkout": ["Your order is already being placed"]})
        if self.state is CheckoutState.SUBMITTED:
            raise ValidationError({"checkout": ["This order has already been placed"]})
        if self.cart_is_empty:
            raise ValidationError({"cart": ["Your cart is empty"]})
        if self.user is None:
            raise ValidationError({"user": ["Sign in to place an order"]})

        self.state = CheckoutState.SUBMITTING
        self.success = None
        try:
            with reporting(self, "checkout_failed", user_id=str(self.user.id)):
                self.order_id = current_domain.process(
                    PlaceOrder(user_id=str(self.user.id), cart=self.cart.lines),
                    asynchronous=False,
                )
        except Exception:
            self.state = CheckoutState.UNSUBMITTED
            raise

        self.state = CheckoutState.SUBMITTED
        self.cart = None
        self.success = "Order placed successfully!"
        logger.info("checkout_completed", order_id=self.order_id)
        return Redirect(ORDERS, SUCCESS_REDIRECT_DELAY)
