"""Storefront settings.

Business knobs (cart lifetime, lockout policy, token lifetimes, pagination)
read from ``STOREFRONT_*`` environment variables. Protean's own adapter
configuration stays with the domain.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorefrontSettings(BaseSettings):
    """Application-level configuration"""

    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", extra="ignore")

    # Carts
    cart_ttl_days: int = Field(default=30, ge=1, description="Days before an idle cart expires")
    default_max_order_quantity: int = Field(default=100, ge=1, description="Per-line quantity ceiling")

    # Accounts
    max_login_attempts: int = Field(default=5, ge=1, description="Failed logins before lockout")
    lock_duration_hours: int = Field(default=2, ge=1, description="Lockout duration")
    reset_token_ttl_minutes: int = Field(default=10, ge=1, description="Password reset token lifetime")
    email_verification_ttl_hours: int = Field(default=24, ge=1, description="Email verification token lifetime")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt cost factor")

    # Pagination
    default_page_size: int = Field(default=10, ge=1, description="Default list page size")
    max_page_size: int = Field(default=100, ge=1, description="Largest accepted page size")

    # Logging
    log_dir: Optional[str] = Field(default=None, description="Directory for rotating log files")
    log_file_prefix: str = Field(default="storefront", description="Log file name prefix")


@lru_cache()
def get_settings() -> StorefrontSettings:
    """Get cached settings instance"""
    return StorefrontSettings()
