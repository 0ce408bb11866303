import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the protean config overlay before the domain is imported."""
    os.environ["PROTEAN_ENV"] = session.config.option.env


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


@pytest.fixture(autouse=True)
def backend():
    """A fresh in-memory backend for every test."""
    from storefront.backend import reset_backend, set_backend
    from storefront.backend.fake_adapter import FakeBackend

    fake = FakeBackend()
    set_backend(fake)
    yield fake
    reset_backend()


# ---------------------------------------------------------------------------
# Seed data
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product(backend):
    """Seed a product row and return it as stored."""

    def _make(**overrides):
        row = {
            "name": "Canvas Tote",
            "description": "Heavy cotton tote bag",
            "price": 10.0,
            "stock_quantity": 5,
            "category": "Bags",
            "image_url": "https://cdn.example.com/tote.jpg",
        }
        row.update(overrides)
        return backend.seed("products", row)[0]

    return _make


@pytest.fixture()
def make_user(backend):
    """Seed credentials plus a profile row; returns the profile row."""

    def _make(email="jane@example.com", password="s3cret-pass", role="customer", full_name="Jane Doe"):
        backend.add_account(email, password)
        return backend.seed("users", {"email": email, "full_name": full_name, "role": role})[0]

    return _make


@pytest.fixture()
def customer(make_user):
    return make_user()


@pytest.fixture()
def admin(make_user):
    return make_user(email="admin@example.com", role="admin", full_name="Ada Admin")
