"""Backend service port (abstract interface).

The storefront keeps no data of its own. Users, products and orders live in a
hosted backend-as-a-service that exposes tables over a request/response API
plus an authentication service. This module defines the contract every
adapter implements, so FakeBackend (dev/test) and RestBackend (production) can
be swapped without touching domain or view code.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Any

# Logical resources exposed by the backend
USERS = "users"
PRODUCTS = "products"
ORDERS = "orders"
ORDER_ITEMS = "order_items"


class BackendError(Exception):
    """A call to the backend service failed.

    The message is the service's own wording and is shown to the shopper as-is.
    """

    def __init__(self, message: str, code: str | None = None, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status


@dataclass(frozen=True)
class Filter:
    """A single column predicate, ANDed with its siblings."""

    column: str
    operator: str
    value: Any

    def matches(self, row: dict) -> bool:
        actual = row.get(self.column)
        if self.operator == "eq":
            return actual == self.value
        if self.operator == "gt":
            return actual is not None and actual > self.value
        if self.operator == "in":
            return actual in self.value
        raise ValueError(f"Unsupported filter operator: {self.operator}")


def eq(column: str, value: Any) -> Filter:
    return Filter(column, "eq", value)


def gt(column: str, value: Any) -> Filter:
    return Filter(column, "gt", value)


def in_(column: str, values: Iterable[Any]) -> Filter:
    return Filter(column, "in", tuple(values))


@dataclass(frozen=True)
class AuthSession:
    """An authenticated session issued by the backend's auth service."""

    user_id: str
    email: str
    access_token: str
    expires_at: datetime | None = None
    refresh_token: str | None = None

    def expired(self, now: datetime | None = None) -> bool:
        if self.expires_at is None:
            return False
        return self.expires_at <= (now or datetime.now(UTC))


class AuthEvent(Enum):
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"


AuthListener = Callable[[AuthEvent, AuthSession | None], None]


class Subscription:
    """Handle returned by on_auth_state_change(); call unsubscribe() to stop."""

    def __init__(self, listeners: list, callback: AuthListener) -> None:
        self._listeners = listeners
        self._callback = callback

    @property
    def active(self) -> bool:
        return self._callback in self._listeners

    def unsubscribe(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class BackendService(ABC):
    """Abstract backend interface: table access plus authentication."""

    def __init__(self) -> None:
        self._auth_listeners: list[AuthListener] = []

    @abstractmethod
    def fork(self) -> "BackendService":
        """Another client of the same project: same data, its own auth session and listeners."""
        ...

    # -------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------
    @abstractmethod
    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        """Read rows matching every filter."""
        ...

    @abstractmethod
    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        """Insert rows and return them as stored (ids and defaults filled in)."""
        ...

    @abstractmethod
    def update(self, table: str, values: dict, filters: Sequence[Filter]) -> list[dict]:
        """Update matching rows and return them as stored."""
        ...

    @abstractmethod
    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        """Delete matching rows and return how many were removed."""
        ...

    # -------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------
    @abstractmethod
    def sign_up(self, email: str, password: str) -> AuthSession | None:
        """Create credentials. Returns a session unless email confirmation is pending."""
        ...

    @abstractmethod
    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        ...

    @abstractmethod
    def sign_out(self) -> None:
        ...

    @abstractmethod
    def get_session(self) -> AuthSession | None:
        ...

    def on_auth_state_change(self, callback: AuthListener) -> Subscription:
        """Register a push-style listener for sign-in and sign-out."""
        self._auth_listeners.append(callback)
        return Subscription(self._auth_listeners, callback)

    def _emit(self, event: AuthEvent, session: AuthSession | None) -> None:
        for listener in list(self._auth_listeners):
            listener(event, session)
