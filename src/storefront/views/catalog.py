"""Catalog page state: products, filters and the cart."""

from decimal import Decimal

import structlog
from protean.exceptions import ValidationError

from storefront.catalogue.listing import categories_of, filter_products, load_catalog
from storefront.catalogue.product import Product
from storefront.ordering.cart import Cart
from storefront.ordering.pricing import line_total
from storefront.views.feedback import reporting
from storefront.views.navigation import CheckoutTransition

logger = structlog.get_logger(__name__)


class CatalogView:
    """Everything the catalog page shows.

    The cart belongs to this view. It starts empty each time the catalog is
    opened and is gone once the view is discarded.
    """

    def __init__(self) -> None:
        self.products: list[Product] = []
        self.search_term = ""
        self.category = ""
        self.cart = Cart.empty()
        self.loading = False
        self.error: str | None = None

    def load(self) -> None:
        self.loading = True
        try:
            with reporting(self, "catalog_load_failed"):
                self.products = load_catalog()
        finally:
            self.loading = False
        logger.debug("catalog_loaded", product_count=len(self.products))

    # -------------------------------------------------------------------
    # Filters
    # -------------------------------------------------------------------
    def set_filters(self, search_term: str | None = None, category: str | None = None) -> None:
        if search_term is not None:
            self.search_term = search_term
        if category is not None:
            self.category = category

    @property
    def visible_products(self) -> list[Product]:
        return filter_products(self.products, search_term=self.search_term, category=self.category)

    @property
    def categories(self) -> list[str]:
        return categories_of(self.products)

    # -------------------------------------------------------------------
    # Cart
    # -------------------------------------------------------------------
    def product(self, product_id) -> Product | None:
        return next((p for p in self.products if str(p.id) == str(product_id)), None)

    def add_to_cart(self, product_id) -> Cart:
        with reporting(self, "add_to_cart_failed", product_id=str(product_id)):
            if self.product(product_id) is None:
                raise ValidationError({"product_id": ["This product is not in the catalog"]})
            self.cart = self.cart.add(product_id)
        return self.cart

    @property
    def cart_total(self) -> Decimal:
        return self.cart.total(self.products)

    def cart_summary(self) -> list[dict]:
        """One entry per cart line, named and priced from the loaded catalog."""
        summary = []
        for product_id, quantity in self.cart.quantities().items():
            product = self.product(product_id)
            summary.append(
                {
                    "product_id": product_id,
                    "name": product.name if product else None,
                    "quantity": quantity,
                    "line_total": line_total(quantity, product.price) if product else Decimal("0.00"),
                }
            )
        return summary

    def proceed_to_checkout(self) -> CheckoutTransition:
        return CheckoutTransition(cart=self.cart, total=self.cart_total)
