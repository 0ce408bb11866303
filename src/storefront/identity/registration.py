"""User registration: command and handler."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.backend import get_backend
from storefront.backend.port import USERS, BackendError
from storefront.domain import storefront
from storefront.identity.user import User, UserRole

logger = structlog.get_logger(__name__)


@storefront.command(part_of="User")
class RegisterUser:
    """Create credentials and a profile, then sign the new user in."""

    email = String(required=True, max_length=254)
    password = String(required=True, max_length=72)
    full_name = String(required=True, max_length=255)
    role = String(choices=UserRole, default=UserRole.CUSTOMER.value)


@storefront.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        if "@" not in command.email:
            raise ValidationError({"email": ["Enter a valid email address"]})

        backend = get_backend()
        backend.sign_up(command.email, command.password)

        # The password stays with the auth service; the profile row never sees it
        rows = backend.insert(
            USERS,
            [
                {
                    "email": command.email,
                    "full_name": command.full_name,
                    "role": command.role or UserRole.CUSTOMER.value,
                }
            ],
        )
        if not rows:
            raise BackendError("Failed to create user profile")
        user = User.from_row(rows[0])

        backend.sign_in_with_password(command.email, command.password)
        logger.info("user_registered", user_id=str(user.id), role=user.role)
        return str(user.id)
