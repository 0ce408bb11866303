"""Shared BDD fixtures and step definitions for cart and checkout."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then, when
from storefront.backend.port import BackendError
from storefront.views.catalog import CatalogView


@pytest.fixture()
def error():
    """Container for captured errors."""
    return {"exc": None}


@pytest.fixture()
def products_by_name():
    return {}


@pytest.fixture()
def catalog():
    return CatalogView()


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the catalog has "{name}" priced at {price:f}'))
def catalog_has_product(make_product, products_by_name, catalog, name, price):
    products_by_name[name] = make_product(name=name, price=price)
    catalog.load()


@given(parsers.cfparse('"{name}" is added to the cart'))
@when(parsers.cfparse('"{name}" is added to the cart'))
def add_to_cart(catalog, products_by_name, name, error):
    try:
        catalog.add_to_cart(products_by_name[name]["id"])
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart total is {total}"))
def cart_total_is(catalog, total):
    assert str(catalog.cart_total) == total


@then("the checkout is rejected")
def checkout_rejected(error):
    assert isinstance(error["exc"], ValidationError | BackendError)
