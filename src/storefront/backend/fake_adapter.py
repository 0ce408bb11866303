"""In-memory fake backend for development and testing.

This adapter simulates the hosted backend without any network calls:
- Tables are lists of dict rows, with ids and timestamps filled in the way the
  real store's column defaults would
- Sign-up/sign-in follow the auth service's rules closely enough for the UI
  flows (unique emails, minimum password length, invalid credentials)
- Any operation can be configured to fail, to exercise error paths
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from uuid import uuid4

from storefront.backend.port import (
    AuthEvent,
    AuthSession,
    BackendError,
    BackendService,
    Filter,
)

AUTH = "auth"
MIN_PASSWORD_LENGTH = 6

# Columns the real schema fills in on insert, per table
_TIMESTAMP_DEFAULTS = {
    "users": ("created_at",),
    "products": ("created_at", "updated_at"),
    "orders": ("created_at",),
}


class FakeBackend(BackendService):
    """Configurable in-memory backend."""

    def __init__(self, require_email_confirmation: bool = False) -> None:
        super().__init__()
        self.require_email_confirmation = require_email_confirmation
        self.tables: dict[str, list[dict]] = {}
        self.calls: list[dict] = []
        self._accounts: dict[str, dict] = {}
        self._session: AuthSession | None = None
        self._failures: dict[tuple[str, str], str] = {}

    def fork(self) -> "FakeBackend":
        client = FakeBackend(require_email_confirmation=self.require_email_confirmation)
        client.tables = self.tables
        client.calls = self.calls
        client._accounts = self._accounts
        client._failures = self._failures
        return client

    # -------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------
    def fail_on(self, operation: str, table: str, message: str = "Service unavailable") -> None:
        """Make every future `operation` on `table` raise BackendError."""
        self._failures[(operation, table)] = message

    def clear_failures(self) -> None:
        self._failures.clear()

    def rows(self, table: str) -> list[dict]:
        """Snapshot of a table's rows, for assertions."""
        return [dict(row) for row in self.tables.get(table, [])]

    def seed(self, table: str, *rows: dict) -> list[dict]:
        """Put rows in place without recording a call or checking failures."""
        return self._store(table, list(rows))

    def add_account(self, email: str, password: str) -> str:
        """Create credentials without opening a session."""
        self._accounts[email] = {"id": str(uuid4()), "password": password}
        return self._accounts[email]["id"]

    def _record(self, operation: str, table: str, **details) -> None:
        self.calls.append({"method": operation, "table": table, **details})
        message = self._failures.get((operation, table))
        if message is not None:
            raise BackendError(message, code="fake_failure", status=503)

    # -------------------------------------------------------------------
    # Tables
    # -------------------------------------------------------------------
    def select(
        self,
        table: str,
        filters: Sequence[Filter] = (),
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        self._record("select", table, filters=list(filters))
        matched = [dict(row) for row in self.tables.get(table, []) if all(f.matches(row) for f in filters)]
        if order_by:
            matched.sort(key=lambda row: (row.get(order_by) is None, row.get(order_by)), reverse=descending)
        return matched

    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        self._record("insert", table, rows=[dict(row) for row in rows])
        return self._store(table, rows)

    def _store(self, table: str, rows: list[dict]) -> list[dict]:
        now = datetime.now(UTC).isoformat()
        stored = []
        for row in rows:
            record = {"id": str(uuid4()), **row}
            for column in _TIMESTAMP_DEFAULTS.get(table, ()):
                record.setdefault(column, now)
            stored.append(record)
        self.tables.setdefault(table, []).extend(stored)
        return [dict(row) for row in stored]

    def update(self, table: str, values: dict, filters: Sequence[Filter]) -> list[dict]:
        self._record("update", table, values=dict(values), filters=list(filters))
        updated = []
        for row in self.tables.get(table, []):
            if all(f.matches(row) for f in filters):
                row.update(values)
                updated.append(dict(row))
        return updated

    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        self._record("delete", table, filters=list(filters))
        existing = self.tables.get(table, [])
        kept = [row for row in existing if not all(f.matches(row) for f in filters)]
        self.tables[table] = kept
        return len(existing) - len(kept)

    # -------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------
    def sign_up(self, email: str, password: str) -> AuthSession | None:
        self._record("sign_up", AUTH, email=email)
        if email in self._accounts:
            raise BackendError("User already registered", code="user_already_exists", status=422)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise BackendError(
                f"Password should be at least {MIN_PASSWORD_LENGTH} characters.",
                code="weak_password",
                status=422,
            )

        self._accounts[email] = {"id": str(uuid4()), "password": password}
        if self.require_email_confirmation:
            return None
        return self._open_session(email)

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        self._record("sign_in_with_password", AUTH, email=email)
        account = self._accounts.get(email)
        if account is None or account["password"] != password:
            raise BackendError("Invalid login credentials", code="invalid_credentials", status=400)
        return self._open_session(email)

    def sign_out(self) -> None:
        self._record("sign_out", AUTH)
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT, None)

    def get_session(self) -> AuthSession | None:
        self._record("get_session", AUTH)
        return self._session

    def _open_session(self, email: str) -> AuthSession:
        self._session = AuthSession(
            user_id=self._accounts[email]["id"],
            email=email,
            access_token=f"fake_token_{uuid4().hex[:12]}",
        )
        self._emit(AuthEvent.SIGNED_IN, self._session)
        return self._session
