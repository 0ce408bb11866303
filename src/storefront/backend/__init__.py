"""Backend service factory.

Provides get_backend() / set_backend() to swap implementations:
- FakeBackend for development and testing
- RestBackend when STOREFRONT_BACKEND_URL points at a hosted project

using_backend() narrows get_backend() to one client for the duration of a
block, so each shopper's requests carry that shopper's auth session.
"""

import os
from contextlib import contextmanager
from contextvars import ContextVar

from storefront.backend.fake_adapter import FakeBackend
from storefront.backend.port import BackendError, BackendService
from storefront.backend.rest_adapter import DEFAULT_TIMEOUT, RestBackend

_current_backend: BackendService | None = None
_client_backend: ContextVar[BackendService | None] = ContextVar("storefront_client_backend", default=None)


def backend_from_env() -> BackendService:
    """Build the adapter described by the STOREFRONT_* environment variables."""
    url = os.getenv("STOREFRONT_BACKEND_URL")
    if not url:
        return FakeBackend()

    api_key = os.getenv("STOREFRONT_BACKEND_KEY")
    if not api_key:
        raise BackendError("STOREFRONT_BACKEND_KEY must be set when STOREFRONT_BACKEND_URL is", code="config")
    timeout = float(os.getenv("STOREFRONT_REQUEST_TIMEOUT", DEFAULT_TIMEOUT))
    return RestBackend(url=url, api_key=api_key, timeout=timeout)


def get_backend() -> BackendService:
    """Return the current backend: the client in scope, else the one configured by the environment."""
    client = _client_backend.get()
    if client is not None:
        return client

    global _current_backend
    if _current_backend is None:
        _current_backend = backend_from_env()
    return _current_backend


def set_backend(backend: BackendService) -> None:
    """Override the active backend (useful for tests)."""
    global _current_backend
    _current_backend = backend


def reset_backend() -> None:
    """Reset to the environment-configured backend."""
    global _current_backend
    _current_backend = None


@contextmanager
def using_backend(backend: BackendService):
    token = _client_backend.set(backend)
    try:
        yield backend
    finally:
        _client_backend.reset(token)
