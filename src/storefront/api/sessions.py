"""One storefront shell per browser.

A random client id travels in a signed session cookie and keys the shell that
holds that browser's page state. Each shell talks to the backend through its
own client, so a sign-in on one browser never reaches another's requests.
"""

import os
import secrets
import time

import structlog
from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from storefront.backend import get_backend, using_backend
from storefront.identity.session import SessionManager
from storefront.utils.logging import STRUCTURED_ENVS, bind_shopper, current_env
from storefront.views.shell import StorefrontShell

logger = structlog.get_logger(__name__)

SESSION_COOKIE = "storefront_session"
CLIENT_KEY = "client_id"
DEFAULT_IDLE_SECONDS = 60 * 60

# Served without a shell
SHELL_FREE_PATHS = frozenset({"/health", "/docs", "/redoc", "/openapi.json"})


class ShellRegistry:
    """Shells by client id. Shells idle longer than `idle_seconds` are stopped and forgotten."""

    def __init__(self, idle_seconds: float = DEFAULT_IDLE_SECONDS) -> None:
        self.idle_seconds = idle_seconds
        self._shells: dict[str, StorefrontShell] = {}
        self._last_seen: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._shells)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._shells

    def shell_for(self, client_id: str, now: float | None = None) -> StorefrontShell:
        now = time.monotonic() if now is None else now
        self.prune(now)

        shell = self._shells.get(client_id)
        if shell is None:
            backend = get_backend().fork()
            shell = StorefrontShell(SessionManager(backend=backend))
            with using_backend(backend):
                shell.start()
            self._shells[client_id] = shell
            logger.info("shell_opened", shells=len(self._shells))

        self._last_seen[client_id] = now
        return shell

    def prune(self, now: float | None = None) -> int:
        now = time.monotonic() if now is None else now
        idle = [cid for cid, seen in self._last_seen.items() if now - seen > self.idle_seconds]
        for client_id in idle:
            self._close(client_id)
        if idle:
            logger.info("shells_pruned", count=len(idle), shells=len(self._shells))
        return len(idle)

    def close_all(self) -> None:
        for client_id in list(self._shells):
            self._close(client_id)

    def _close(self, client_id: str) -> None:
        self._last_seen.pop(client_id, None)
        shell = self._shells.pop(client_id, None)
        if shell is not None:
            shell.stop()


def session_secret() -> str:
    secret = os.getenv("STOREFRONT_SESSION_SECRET")
    if secret:
        return secret
    logger.warning("session_secret_generated", hint="set STOREFRONT_SESSION_SECRET to keep sessions across restarts")
    return secrets.token_urlsafe(32)


def install_shell_sessions(app: FastAPI, secret_key: str | None = None, idle_seconds: float = DEFAULT_IDLE_SECONDS):
    """Give every request the shell of the browser that sent it, as `request.state.shell`."""
    app.state.shells = ShellRegistry(idle_seconds=idle_seconds)

    @app.middleware("http")
    async def client_shell_middleware(request: Request, call_next):
        if request.url.path in SHELL_FREE_PATHS:
            return await call_next(request)

        client_id = request.session.get(CLIENT_KEY)
        if client_id is None:
            client_id = request.session[CLIENT_KEY] = secrets.token_urlsafe(32)

        shell = request.app.state.shells.shell_for(client_id)
        request.state.shell = shell
        if shell.user is not None:
            bind_shopper(str(shell.user.id), shell.user.email)

        with using_backend(shell.backend):
            return await call_next(request)

    # Added last so it wraps the shell middleware and `request.session` is ready
    app.add_middleware(
        SessionMiddleware,
        secret_key=secret_key or session_secret(),
        session_cookie=SESSION_COOKIE,
        max_age=int(idle_seconds),
        same_site="lax",
        https_only=current_env() in STRUCTURED_ENVS,
    )
    return app.state.shells
