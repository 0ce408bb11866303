"""Storefront shell: the UI state of one shopper's browser session.

The shell owns the session manager and whichever catalog or checkout page is
currently open. Moving from catalog to checkout hands the cart over and drops
the catalog; leaving the catalog any other way drops the cart with it.
"""

import structlog

from storefront.identity.session import SessionManager
from storefront.views.account import AccountView
from storefront.views.admin import AdminPanel
from storefront.views.catalog import CatalogView
from storefront.views.checkout import CheckoutView
from storefront.views.navigation import home_route_for
from storefront.views.orders import OrderHistoryView

logger = structlog.get_logger(__name__)


class StorefrontShell:
    def __init__(self, session: SessionManager | None = None) -> None:
        self.session = session or SessionManager()
        self.account = AccountView(self.session)
        self.catalog: CatalogView | None = None
        self.checkout: CheckoutView | None = None
        self._unsubscribe = None

    @property
    def user(self):
        return self.session.user

    @property
    def backend(self):
        return self.session.backend

    def start(self) -> None:
        self.session.start()
        self._unsubscribe = self.session.subscribe(self._on_user_changed)

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.session.stop()

    def _on_user_changed(self, user) -> None:
        # Page state belongs to whoever was signed in when it was opened
        self.catalog = None
        self.checkout = None
        logger.debug("pages_reset", signed_in=user is not None)

    def home_route(self) -> str:
        return home_route_for(self.user)

    # -------------------------------------------------------------------
    # Pages
    # -------------------------------------------------------------------
    def open_catalog(self) -> CatalogView:
        """Open the catalog with a fresh, empty cart."""
        self.checkout = None
        self.catalog = CatalogView()
        self.catalog.load()
        return self.catalog

    def current_catalog(self) -> CatalogView:
        return self.catalog if self.catalog is not None else self.open_catalog()

    def leave_catalog(self) -> None:
        self.catalog = None

    def open_checkout(self) -> CheckoutView:
        """Move to checkout, taking the catalog's cart along. Without a catalog there is no cart."""
        transition = self.catalog.proceed_to_checkout() if self.catalog is not None else None
        self.catalog = None
        self.checkout = CheckoutView(self.user, transition)
        return self.checkout

    def open_orders(self) -> OrderHistoryView:
        self.leave_catalog()
        view = OrderHistoryView(self.user)
        view.load()
        return view

    def open_admin(self) -> AdminPanel:
        self.leave_catalog()
        return AdminPanel(self.user)
