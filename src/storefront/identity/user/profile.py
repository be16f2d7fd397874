"""Profile and preferences updates — commands and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.identity.user.user import Role, User


@storefront.command(part_of="User")
class UpdateProfile:
    """Change profile fields. Only the keys present in ``changes`` are applied."""

    user_id: Identifier(required=True)
    changes: Text(required=True)  # JSON: subset of {name, phone, avatar}


@storefront.command(part_of="User")
class UpdatePreferences:
    user_id: Identifier(required=True)
    preferences: Text(required=True)  # JSON: subset of Preferences fields


@storefront.command(part_of="User")
class ChangeRole:
    user_id: Identifier(required=True)
    role: String(required=True, max_length=10)


@storefront.command_handler(part_of=User)
class UpdateProfileHandler:
    @handle(UpdateProfile)
    def update_profile(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)

        changes = json.loads(command.changes)
        user.update_profile(**{k: v for k, v in changes.items() if k in ("name", "phone", "avatar")})
        repo.add(user)

    @handle(UpdatePreferences)
    def update_preferences(self, command):
        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.update_preferences(**json.loads(command.preferences))
        repo.add(user)

    @handle(ChangeRole)
    def change_role(self, command):
        if command.role not in [r.value for r in Role]:
            raise ValidationError({"role": [f"Unknown role {command.role}"]})

        repo = current_domain.repository_for(User)
        user = repo.get(command.user_id)
        user.role = command.role
        repo.add(user)
