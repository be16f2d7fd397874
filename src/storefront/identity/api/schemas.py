"""Pydantic request schemas for the users API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Jane Doe",
                    "email": "jane@example.com",
                    "password": "s3cret!",
                    "phone": "+15551234567",
                }
            ]
        }
    }

    name: str = Field(..., max_length=50)
    email: str = Field(..., max_length=254)
    password: str = Field(..., min_length=6, max_length=128)
    phone: str | None = Field(None, max_length=17)


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str = Field(..., max_length=128)


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, max_length=50)
    phone: str | None = Field(None, max_length=17)
    avatar: str | None = Field(None, max_length=500)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., max_length=128)
    new_password: str = Field(..., min_length=6, max_length=128)


class ForgotPasswordRequest(BaseModel):
    email: str = Field(..., max_length=254)


class ResetPasswordRequest(BaseModel):
    email: str = Field(..., max_length=254)
    token: str = Field(..., max_length=64)
    password: str = Field(..., min_length=6, max_length=128)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., max_length=64)


class UpdatePreferencesRequest(BaseModel):
    language: str | None = Field(None, max_length=10)
    currency: str | None = Field(None, max_length=3)
    notify_email: bool | None = None
    notify_sms: bool | None = None
    notify_push: bool | None = None


class AddAddressRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "type": "home",
                    "street": "123 Main St",
                    "city": "Springfield",
                    "state": "IL",
                    "zip_code": "62701",
                    "country": "US",
                    "is_default": False,
                }
            ]
        }
    }

    type: str | None = Field(None, max_length=10)
    street: str = Field(..., max_length=255)
    city: str = Field(..., max_length=100)
    state: str = Field(..., max_length=100)
    zip_code: str = Field(..., max_length=20)
    country: str | None = Field(None, max_length=100)
    is_default: bool = False


class ChangeRoleRequest(BaseModel):
    role: str = Field(..., max_length=10)
