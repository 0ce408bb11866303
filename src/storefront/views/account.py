"""Login, signup, profile and logout."""

import structlog

from storefront.identity.session import SessionManager
from storefront.views.feedback import reporting
from storefront.views.navigation import DASHBOARD, LOGIN, SUCCESS_REDIRECT_DELAY, Redirect

logger = structlog.get_logger(__name__)


class AccountView:
    def __init__(self, session: SessionManager) -> None:
        self.session = session
        self.error: str | None = None
        self.success: str | None = None

    def login(self, email: str, password: str) -> Redirect:
        self.success = None
        with reporting(self, "login_failed", email=email):
            self.session.sign_in(email, password)
        return Redirect(DASHBOARD)

    def signup(self, email: str, password: str, full_name: str) -> Redirect:
        """Public signup always creates a customer account."""
        self.success = None
        with reporting(self, "signup_failed", email=email):
            self.session.sign_up(email, password, full_name)
        self.success = "Account created! Redirecting..."
        return Redirect(DASHBOARD, SUCCESS_REDIRECT_DELAY)

    def logout(self) -> Redirect:
        with reporting(self, "logout_failed"):
            self.session.sign_out()
        return Redirect(LOGIN)

    def profile(self) -> dict | None:
        user = self.session.user
        if user is None:
            return None
        return {
            "id": str(user.id),
            "email": user.email,
            "full_name": user.full_name,
            "role": user.role,
            "role_label": "Administrator" if user.is_admin else "Customer",
        }
