"""Profile lookups against the `users` table."""

from storefront.backend import get_backend
from storefront.backend.port import USERS, eq
from storefront.identity.user import User


def load_profile(email: str) -> User | None:
    """Return the profile for an email, or None when no row exists yet."""
    rows = get_backend().select(USERS, [eq("email", email)])
    return User.from_row(rows[0]) if rows else None


def load_profile_by_id(user_id: str) -> User | None:
    rows = get_backend().select(USERS, [eq("id", user_id)])
    return User.from_row(rows[0]) if rows else None
