"""Caller resolution for protected endpoints.

The bearer value in ``Authorization`` names the calling user. Issuing and
verifying signed tokens belongs to whatever sits in front of this service.
"""

from fastapi import Header
from protean.utils.globals import current_domain

from storefront.identity.user.user import User
from storefront.shared.api import AuthenticationFailed, PermissionDenied


def _bearer(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() != "bearer" or not value.strip():
        return None
    return value.strip()


def optional_user(authorization: str | None = Header(default=None)) -> User | None:
    user_id = _bearer(authorization)
    if user_id is None:
        return None
    return current_domain.repository_for(User).find(user_id)


def current_user(authorization: str | None = Header(default=None)) -> User:
    if _bearer(authorization) is None:
        raise AuthenticationFailed("Not authorized to access this route")

    user = optional_user(authorization)
    if user is None:
        raise AuthenticationFailed("No user found with this token")
    return user


def require_role(user: User, *roles: str) -> User:
    if user.role not in roles:
        raise PermissionDenied(f"User role {user.role} is not authorized to access this route")
    return user
