"""Session manager: the one owner of "who is signed in".

The backend pushes sign-in/sign-out notifications; the manager subscribes to
them exactly once between start() and stop(), resolves the session to a User
profile, and tells its own observers whenever that user changes. The UI layer
subscribes on startup and unsubscribes on teardown.
"""

from collections.abc import Callable

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.backend import get_backend, using_backend
from storefront.backend.port import AuthEvent, AuthSession, BackendService, Subscription
from storefront.identity.profiles import load_profile
from storefront.identity.registration import RegisterUser
from storefront.identity.user import User, UserRole
from storefront.utils.logging import bind_shopper

logger = structlog.get_logger(__name__)

Observer = Callable[[User | None], None]


class SessionManager:
    def __init__(self, backend: BackendService | None = None) -> None:
        self._backend = backend
        self._user: User | None = None
        self._loading = True
        self._subscription: Subscription | None = None
        self._observers: list[Observer] = []

    @property
    def backend(self) -> BackendService:
        return self._backend or get_backend()

    @property
    def user(self) -> User | None:
        return self._user

    @property
    def loading(self) -> bool:
        """True until start() has resolved the initial session."""
        return self._loading

    @property
    def started(self) -> bool:
        return self._subscription is not None

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def start(self) -> None:
        if self.started:
            raise ValidationError({"session": ["Session manager is already started"]})

        if self._backend is None:
            self._backend = get_backend()
        self._loading = True
        try:
            session = self.backend.get_session()
            if session is not None:
                self._set_user(load_profile(session.email))
        finally:
            self._loading = False

        self._subscription = self.backend.on_auth_state_change(self._on_auth_state_change)
        logger.info("session_manager_started", signed_in=self._user is not None)

    def stop(self) -> None:
        if self._subscription is None:
            return
        self._subscription.unsubscribe()
        self._subscription = None
        logger.info("session_manager_stopped")

    # -------------------------------------------------------------------
    # Observers
    # -------------------------------------------------------------------
    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register an observer; returns a callable that removes it again."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _set_user(self, user: User | None) -> None:
        previous = self._user
        self._user = user
        if _identity(previous) == _identity(user):
            return

        bind_shopper(str(user.id) if user else None, user.email if user else None)
        for observer in list(self._observers):
            observer(user)

    def _on_auth_state_change(self, event: AuthEvent, session: AuthSession | None) -> None:
        logger.debug("auth_state_changed", auth_event=event.value)
        if event in (AuthEvent.SIGNED_IN, AuthEvent.TOKEN_REFRESHED) and session is not None:
            profile = load_profile(session.email)
            # A brand-new account signs in before its profile row exists
            if profile is not None:
                self._set_user(profile)
        else:
            self._set_user(None)

    # -------------------------------------------------------------------
    # Credential operations
    # -------------------------------------------------------------------
    def sign_in(self, email: str, password: str) -> User | None:
        self.backend.sign_in_with_password(email, password)
        if self._user is None or self._user.email != email:
            self._set_user(load_profile(email))
        return self._user

    def sign_up(self, email: str, password: str, full_name: str, role: str = UserRole.CUSTOMER.value) -> User | None:
        # Registration signs in through this manager's client
        with using_backend(self.backend):
            current_domain.process(
                RegisterUser(email=email, password=password, full_name=full_name, role=role),
                asynchronous=False,
            )
        if self._user is None or self._user.email != email:
            self._set_user(load_profile(email))
        return self._user

    def sign_out(self) -> None:
        self.backend.sign_out()
        self._set_user(None)


def _identity(user: User | None):
    return (str(user.id), user.role) if user is not None else None
