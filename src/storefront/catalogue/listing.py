"""Catalog queries and client-side filtering."""

from collections.abc import Iterable

import structlog
from protean.exceptions import ValidationError

from storefront.backend import get_backend
from storefront.backend.port import PRODUCTS, eq, gt, in_
from storefront.catalogue.product import Product

logger = structlog.get_logger(__name__)


def _products(rows: Iterable[dict]) -> list[Product]:
    """Rows the Product aggregate refuses are logged and left out, not shown."""
    products = []
    for row in rows:
        try:
            products.append(Product.from_row(row))
        except ValidationError as exc:
            logger.warning("product_row_skipped", product_id=row.get("id"), errors=exc.messages)
    return products


def load_catalog() -> list[Product]:
    """Products a shopper can buy: anything with stock left."""
    return _products(get_backend().select(PRODUCTS, [gt("stock_quantity", 0)]))


def load_all_products() -> list[Product]:
    """Every product, sold out or not, for the admin panel."""
    return _products(get_backend().select(PRODUCTS))


def load_product(product_id: str) -> Product | None:
    rows = _products(get_backend().select(PRODUCTS, [eq("id", product_id)]))
    return rows[0] if rows else None


def load_products(product_ids: Iterable[str]) -> list[Product]:
    ids = list(product_ids)
    if not ids:
        return []
    return _products(get_backend().select(PRODUCTS, [in_("id", ids)]))


def filter_products(products: Iterable[Product], search_term: str = "", category: str = "") -> list[Product]:
    return [p for p in products if p.matches(search_term=search_term, category=category)]


def categories_of(products: Iterable[Product]) -> list[str]:
    """Distinct category labels in first-seen order."""
    return list(dict.fromkeys(p.category for p in products if p.category))
