"""Password authentication with failed-attempt lockout.

Authentication reports its outcome instead of raising on bad credentials,
so the failure counter is saved even when the login is refused.
"""

from enum import Enum

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.user.user import User

logger = structlog.get_logger(__name__)


class LoginOutcome(Enum):
    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    LOCKED = "locked"


@storefront.command(part_of="User")
class AuthenticateUser:
    email: String(required=True, max_length=254)
    password: String(required=True, max_length=128)


@storefront.command_handler(part_of=User)
class AuthenticateUserHandler:
    @handle(AuthenticateUser)
    def authenticate(self, command):
        repo = current_domain.repository_for(User)
        user = repo.find_by_email(command.email)

        # Unknown emails look the same as wrong passwords
        if user is None:
            logger.info("Login rejected", reason="unknown_email")
            return {"outcome": LoginOutcome.INVALID_CREDENTIALS.value, "user_id": None}

        if user.is_locked():
            logger.warning("Login rejected", user_id=str(user.id), reason="locked")
            return {
                "outcome": LoginOutcome.LOCKED.value,
                "user_id": str(user.id),
                "locked_until": user.lock_until,
            }

        if not user.match_password(command.password):
            user.register_failed_login()
            repo.add(user)
            logger.warning(
                "Login rejected",
                user_id=str(user.id),
                reason="bad_password",
                attempts=user.login_attempts,
            )
            return {
                "outcome": LoginOutcome.INVALID_CREDENTIALS.value,
                "user_id": str(user.id),
                "attempts": user.login_attempts,
            }

        user.record_login()
        repo.add(user)
        logger.info("User logged in", user_id=str(user.id))
        return {"outcome": LoginOutcome.SUCCESS.value, "user_id": str(user.id)}
