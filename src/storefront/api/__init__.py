"""Storefront API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import admin_router, auth_router, catalog_router, checkout_router, orders_router
from storefront.api.sessions import ShellRegistry, install_shell_sessions

__all__ = [
    "ShellRegistry",
    "admin_router",
    "auth_router",
    "catalog_router",
    "checkout_router",
    "install_shell_sessions",
    "orders_router",
    "register_error_handlers",
]
