"""FastAPI endpoints for user accounts."""

import json

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.identity.api.principal import current_user, require_role
from storefront.identity.api.schemas import (
    AddAddressRequest,
    ChangePasswordRequest,
    ChangeRoleRequest,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdatePreferencesRequest,
    UpdateProfileRequest,
    VerifyEmailRequest,
)
from storefront.identity.user.account import (
    ChangePassword,
    RequestEmailVerification,
    RequestPasswordReset,
    ResetPassword,
    VerifyEmail,
)
from storefront.identity.user.addresses import AddAddress, RemoveAddress, SetDefaultAddress
from storefront.identity.user.authentication import AuthenticateUser, LoginOutcome
from storefront.identity.user.profile import ChangeRole, UpdatePreferences, UpdateProfile
from storefront.identity.user.registration import RegisterUser
from storefront.identity.user.user import Role, User
from storefront.shared.api import AuthenticationFailed, PermissionDenied, envelope, paginated

router = APIRouter(prefix="/users", tags=["users"])

_PRIVATE_FIELDS = (
    "password_hash",
    "email_verification_token",
    "email_verification_expire",
    "reset_password_token",
    "reset_password_expire",
)


def user_view(user: User) -> dict:
    data = user.to_dict()
    for field in _PRIVATE_FIELDS:
        data.pop(field, None)
    return data


def _reload(user_id) -> dict:
    return user_view(current_domain.repository_for(User).get(user_id))


# --- Account endpoints ---


@router.post("/register", status_code=201)
async def register(body: RegisterRequest) -> dict:
    command = RegisterUser(
        name=body.name,
        email=body.email,
        password=body.password,
        phone=body.phone,
    )
    user_id = current_domain.process(command, asynchronous=False)
    return envelope(_reload(user_id), "User registered successfully")


@router.post("/login")
async def login(body: LoginRequest) -> dict:
    result = current_domain.process(AuthenticateUser(email=body.email, password=body.password), asynchronous=False)

    if result["outcome"] == LoginOutcome.LOCKED.value:
        raise PermissionDenied("Account is temporarily locked due to too many failed login attempts")
    if result["outcome"] != LoginOutcome.SUCCESS.value:
        raise AuthenticationFailed("Invalid credentials")
    return envelope(_reload(result["user_id"]), "Logged in successfully")


@router.post("/forgot-password")
async def forgot_password(body: ForgotPasswordRequest) -> dict:
    # Delivering the token by email happens outside this service
    current_domain.process(RequestPasswordReset(email=body.email), asynchronous=False)
    return envelope(message="Password reset token issued")


@router.put("/reset-password")
async def reset_password(body: ResetPasswordRequest) -> dict:
    command = ResetPassword(email=body.email, token=body.token, new_password=body.password)
    current_domain.process(command, asynchronous=False)
    return envelope(message="Password reset successfully")


# --- Current user endpoints ---


@router.get("/me")
async def me(user: User = Depends(current_user)) -> dict:
    return envelope(user_view(user))


@router.put("/me")
async def update_profile(body: UpdateProfileRequest, user: User = Depends(current_user)) -> dict:
    changes = body.model_dump(exclude_unset=True)
    current_domain.process(UpdateProfile(user_id=user.id, changes=json.dumps(changes)), asynchronous=False)
    return envelope(_reload(user.id), "Profile updated")


@router.put("/me/password")
async def change_password(body: ChangePasswordRequest, user: User = Depends(current_user)) -> dict:
    command = ChangePassword(
        user_id=user.id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    current_domain.process(command, asynchronous=False)
    return envelope(message="Password updated")


@router.put("/me/preferences")
async def update_preferences(body: UpdatePreferencesRequest, user: User = Depends(current_user)) -> dict:
    preferences = body.model_dump(exclude_none=True)
    current_domain.process(
        UpdatePreferences(user_id=user.id, preferences=json.dumps(preferences)),
        asynchronous=False,
    )
    return envelope(_reload(user.id)["preferences"], "Preferences updated")


@router.post("/me/verify-email/request")
async def request_email_verification(user: User = Depends(current_user)) -> dict:
    current_domain.process(RequestEmailVerification(user_id=user.id), asynchronous=False)
    return envelope(message="Verification token issued")


@router.post("/me/verify-email")
async def verify_email(body: VerifyEmailRequest, user: User = Depends(current_user)) -> dict:
    current_domain.process(VerifyEmail(user_id=user.id, token=body.token), asynchronous=False)
    return envelope(message="Email verified")


# --- Address book ---


@router.post("/me/addresses", status_code=201)
async def add_address(body: AddAddressRequest, user: User = Depends(current_user)) -> dict:
    command = AddAddress(
        user_id=user.id,
        type=body.type,
        street=body.street,
        city=body.city,
        state=body.state,
        zip_code=body.zip_code,
        country=body.country,
        is_default=body.is_default,
    )
    current_domain.process(command, asynchronous=False)
    return envelope(_reload(user.id)["addresses"], "Address added")


@router.delete("/me/addresses/{address_id}")
async def remove_address(address_id: str, user: User = Depends(current_user)) -> dict:
    current_domain.process(RemoveAddress(user_id=user.id, address_id=address_id), asynchronous=False)
    return envelope(_reload(user.id)["addresses"], "Address removed")


@router.put("/me/addresses/{address_id}/default")
async def set_default_address(address_id: str, user: User = Depends(current_user)) -> dict:
    current_domain.process(SetDefaultAddress(user_id=user.id, address_id=address_id), asynchronous=False)
    return envelope(_reload(user.id)["addresses"], "Default address updated")


# --- Administration ---


@router.get("")
async def list_users(
    page: int = 1,
    limit: int | None = None,
    role: str | None = None,
    user: User = Depends(current_user),
) -> dict:
    require_role(user, Role.ADMIN.value)
    users, total = current_domain.repository_for(User).listing(page, limit, role=role)
    return paginated([user_view(u) for u in users], total, page, limit)


@router.put("/{user_id}/role")
async def change_role(user_id: str, body: ChangeRoleRequest, user: User = Depends(current_user)) -> dict:
    require_role(user, Role.ADMIN.value)
    current_domain.process(ChangeRole(user_id=user_id, role=body.role), asynchronous=False)
    return envelope(_reload(user_id), "Role updated")
