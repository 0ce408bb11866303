"""REST backend adapter for the hosted backend-as-a-service.

Tables are served PostgREST-style under /rest/v1/<table> and authentication
GoTrue-style under /auth/v1. Every request carries the project API key and,
once signed in, the session's bearer token. Every request has a timeout:
a hung backend turns into a BackendError instead of a frozen page.
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

import requests
import structlog

from storefront.backend.port import (
    AuthEvent,
    AuthSession,
    BackendError,
    BackendService,
    Filter,
)

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 10.0


def _encode_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    return str(value)


def _encode_filter(f: Filter) -> tuple[str, str]:
    if f.operator == "in":
        quoted = ",".join(f'"{_encode_value(v)}"' for v in f.value)
        return f.column, f"in.({quoted})"
    if f.operator in ("eq", "gt"):
        return f.column, f"{f.operator}.{_encode_value(f.value)}"
    raise ValueError(f"Unsupported filter operator: {f.operator}")


class RestBackend(BackendService):
    """Production adapter over HTTP."""

    def __init__(self, url: str, api_key: str, timeout: float = DEFAULT_TIMEOUT) -> None:
        super().__init__()
        self.url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self._http = requests.Session()
        self._http.headers.update({"apikey": api_key, "Content-Type": "application/json"})
        self._session: AuthSession | None = None

    def fork(self) -> "RestBackend":
        return RestBackend(url=self.url, api_key=self.api_key, timeout=self.timeout)

    # -------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------
    def _request(self, method: str, path: str, *, params=None, json=None, headers=None):
        session = self._live_session()
        bearer = session.access_token if session else self.api_key
        return self._send(method, path, bearer, params=params, json=json, headers=headers)

    def _send(self, method: str, path: str, bearer: str, *, params=None, json=None, headers=None):
        all_headers = {"Authorization": f"Bearer {bearer}", **(headers or {})}

        try:
            response = self._http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=json,
                headers=all_headers,
                timeout=self.timeout,
            )
        except requests.Timeout:
            logger.warning("backend_timeout", method=method, path=path, timeout=self.timeout)
            raise BackendError("The request timed out. Please try again.", code="timeout") from None
        except requests.RequestException as exc:
            logger.warning("backend_unreachable", method=method, path=path, error=str(exc))
            raise BackendError(str(exc), code="network_error") from exc

        if not response.ok:
            raise self._error_from(response)
        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    @staticmethod
    def _error_from(response) -> BackendError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        message = (
            body.get("message")
            or body.get("msg")
            or body.get("error_description")
            or body.get("error")
            or response.reason
            or f"Request failed with status {response.status_code}"
        )
        code = body.get("code") or body.get("error_code")
        logger.warning("backend_error", status=response.status_code, code=code, message=message)
        return BackendError(message, code=str(code) if code is not None else None, status=response.status_code)

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
        params = [("select", "*"), *(_encode_filter(f) for f in filters)]
        if order_by:
            params.append(("order", f"{order_by}.{'desc' if descending else 'asc'}"))
        return self._request("GET", f"/rest/v1/{table}", params=params) or []

    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        return (
            self._request(
                "POST",
                f"/rest/v1/{table}",
                json=rows,
                headers={"Prefer": "return=representation"},
            )
            or []
        )

    def update(self, table: str, values: dict, filters: Sequence[Filter]) -> list[dict]:
        return (
            self._request(
                "PATCH",
                f"/rest/v1/{table}",
                params=[_encode_filter(f) for f in filters],
                json=values,
                headers={"Prefer": "return=representation"},
            )
            or []
        )

    def delete(self, table: str, filters: Sequence[Filter]) -> int:
        deleted = self._request(
            "DELETE",
            f"/rest/v1/{table}",
            params=[_encode_filter(f) for f in filters],
            headers={"Prefer": "return=representation"},
        )
        return len(deleted or [])

    # -------------------------------------------------------------------
    # Authentication
    # -------------------------------------------------------------------
    def sign_up(self, email: str, password: str) -> AuthSession | None:
        body = self._send("POST", "/auth/v1/signup", self.api_key, json={"email": email, "password": password})
        if body and body.get("access_token"):
            return self._open_session(body)
        # Email confirmation pending: the service returns the user without a token
        return None

    def sign_in_with_password(self, email: str, password: str) -> AuthSession:
        body = self._send(
            "POST",
            "/auth/v1/token",
            self.api_key,
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        return self._open_session(body or {})

    def sign_out(self) -> None:
        if self._session is not None and not self._session.expired():
            self._request("POST", "/auth/v1/logout")
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT, None)

    def get_session(self) -> AuthSession | None:
        return self._live_session()

    def _live_session(self) -> AuthSession | None:
        """The current session; an expired one is refreshed, or dropped with a SIGNED_OUT."""
        session = self._session
        if session is None or not session.expired():
            return session

        if session.refresh_token:
            try:
                return self._refresh(session)
            except BackendError as exc:
                logger.warning("session_refresh_failed", email=session.email, error=exc.message)

        logger.info("session_expired", email=session.email)
        self._session = None
        self._emit(AuthEvent.SIGNED_OUT, None)
        return None

    def _refresh(self, session: AuthSession) -> AuthSession:
        # Refresh grants are authorized by the API key alone
        body = self._send(
            "POST",
            "/auth/v1/token",
            self.api_key,
            params={"grant_type": "refresh_token"},
            json={"refresh_token": session.refresh_token},
        )
        return self._open_session(body or {}, AuthEvent.TOKEN_REFRESHED)

    def _open_session(self, body: dict, event: AuthEvent = AuthEvent.SIGNED_IN) -> AuthSession:
        user = body.get("user") or {}
        if not body.get("access_token") or not user.get("email"):
            raise BackendError("Authentication response did not include a session", code="invalid_response")

        expires_in = body.get("expires_in")
        self._session = AuthSession(
            user_id=str(user.get("id")),
            email=user["email"],
            access_token=body["access_token"],
            expires_at=datetime.now(UTC) + timedelta(seconds=expires_in) if expires_in else None,
            refresh_token=body.get("refresh_token"),
        )
        self._emit(event, self._session)
        return self._session
