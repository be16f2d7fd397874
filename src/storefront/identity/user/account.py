"""Account maintenance — password reset, email verification and password change."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.user.user import User

logger = structlog.get_logger(__name__)


@storefront.command(part_of="User")
class RequestPasswordReset:
    email: String(required=True, max_length=254)


@storefront.command(part_of="User")
class ResetPassword:
    email: String(required=True, max_length=254)
    token: String(required=True, max_length=64)
    new_password: String(required=True, max_length=128)


@storefront.command(part_of="User")
class ChangePassword:
    user_id: Identifier(required=True)
    current_password: String(required=True, max_length=128)
    new_password: String(required=True, max_length=128)


@storefront.command(part_of="User")
class RequestEmailVerification:
    user_id: Identifier(required=True)


@storefront.command(part_of="User")
class VerifyEmail:
    user_id: Identifier(required=True)
    token: String(required=True, max_length=64)


@storefront.command_handler(part_of=User)
class ManageAccountHandler:
    @handle(RequestPasswordReset)
    def request_password_reset(self, command):
        """Returns the raw token; delivering it to the user is the caller's job."""
        repo = current_domain.repository_for(User)
        user = repo.find_by_email(command.email)
        if user is None:
            raise ValidationError({"email": ["There is no user with that email"]})

        token = user.issue_password_reset_token()
        repo.add(user)
        logger.info("Password reset requested", user_id=str(user.id))
        return token

    @handle(ResetPassword)
    def reset_password(self, command):
        repo = current_domain.repository_for(User)
        user = repo.find_by_email(command.email)
        if user is None:
            raise ValidationError({"token": ["Invalid or expired reset token"]})

        user.reset_password(command.token, command.new_password)
        repo.add(user)
        logger.info("Password reset", user_id=str(user.id))

    @handle(ChangePassword)
    def change_password(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        if not user.match_password(command.current_password):
            raise ValidationError({"current_password": ["Current password is incorrect"]})

        user.change_password(command.new_password)
        repo.add(user)

    @handle(RequestEmailVerification)
    def request_email_verification(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        if user.is_email_verified:
            raise ValidationError({"email": ["Email is already verified"]})

        token = user.issue_email_verification_token()
        repo.add(user)
        return token

    @handle(VerifyEmail)
    def verify_email(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.verify_email(command.token)
        repo.add(user)
