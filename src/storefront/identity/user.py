"""User aggregate: a shopper's or administrator's profile.

Credentials belong to the backend's auth service. The profile row in the
`users` table is matched to a session by email.
"""

from enum import Enum

from protean.fields import DateTime, Identifier, String

from storefront.domain import storefront
from storefront.utils.rows import parse_timestamp, pick


class UserRole(Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"


@storefront.aggregate
class User:
    id = Identifier(identifier=True, required=True)
    email = String(required=True, max_length=254)
    full_name = String(max_length=255)
    role = String(choices=UserRole, default=UserRole.CUSTOMER.value)
    created_at = DateTime()

    @classmethod
    def from_row(cls, row):
        data = pick(row, "id", "email", "full_name", "role")
        return cls(**data, created_at=parse_timestamp(row.get("created_at")))

    @property
    def is_admin(self):
        return self.role == UserRole.ADMIN.value
