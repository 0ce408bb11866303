"""Tests for catalog queries against the backend."""

import pytest
from storefront.backend.port import BackendError
from storefront.catalogue.listing import load_all_products, load_catalog, load_product, load_products


class TestLoadCatalog:
    def test_only_products_with_stock(self, make_product):
        make_product(name="Available", stock_quantity=2)
        make_product(name="Sold Out", stock_quantity=0)

        assert [p.name for p in load_catalog()] == ["Available"]

    def test_filters_in_the_backend_query(self, backend):
        load_catalog()
        [call] = backend.calls
        assert call["table"] == "products"
        assert [(f.column, f.operator, f.value) for f in call["filters"]] == [("stock_quantity", "gt", 0)]

    def test_row_with_unusable_price_is_left_out(self, make_product):
        make_product(name="Available")
        make_product(name="Broken", price=float("inf"))

        assert [p.name for p in load_catalog()] == ["Available"]

    def test_backend_failure_propagates(self, backend):
        backend.fail_on("select", "products", message="JWT expired")
        with pytest.raises(BackendError) as exc:
            load_catalog()
        assert exc.value.message == "JWT expired"


class TestLoadAllProducts:
    def test_includes_sold_out(self, make_product):
        make_product(name="Available", stock_quantity=2)
        make_product(name="Sold Out", stock_quantity=0)
        assert {p.name for p in load_all_products()} == {"Available", "Sold Out"}


class TestLoadByIds:
    def test_load_product(self, make_product):
        row = make_product(name="Mug")
        assert load_product(row["id"]).name == "Mug"

    def test_load_missing_product(self):
        assert load_product("missing") is None

    def test_load_products_by_ids(self, make_product):
        first = make_product(name="Mug")
        make_product(name="Bowl")
        assert [p.name for p in load_products([first["id"]])] == ["Mug"]

    def test_load_products_without_ids_skips_backend(self, backend):
        assert load_products([]) == []
        assert backend.calls == []
