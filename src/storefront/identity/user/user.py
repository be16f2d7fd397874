"""User aggregate root with Address entity and Preferences value object."""

import re
from datetime import UTC, datetime, timedelta
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, HasMany, Integer, String, ValueObject
from protean.utils.reflection import declared_fields

from storefront.domain import storefront
from storefront.identity.shared.passwords import check_password, digest_token, hash_password, new_token
from storefront.settings import get_settings

_EMAIL_PATTERN = re.compile(r"^[\w.+-]+@([\w-]+\.)+[A-Za-z]{2,}$")
_PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{0,15}$")
_MIN_PASSWORD_LENGTH = 6

# Sentinel for distinguishing "not provided" from None in partial updates
_UNSET = object()


class Role(Enum):
    USER = "user"
    VENDOR = "vendor"
    ADMIN = "admin"


class AddressType(Enum):
    HOME = "home"
    WORK = "work"
    OTHER = "other"


def _validated_password(password):
    if not password or len(password) < _MIN_PASSWORD_LENGTH:
        raise ValidationError({"password": [f"Password must be at least {_MIN_PASSWORD_LENGTH} characters"]})
    return password


@storefront.value_object(part_of="User")
class Preferences:
    """Display and notification preferences. Replaced wholesale on update."""

    language: String(max_length=10, default="en")
    currency: String(max_length=3, default="USD")
    notify_email: Boolean(default=True)
    notify_sms: Boolean(default=False)
    notify_push: Boolean(default=True)


@storefront.entity(part_of="User")
class Address:
    """An entry in the user's address book.

    Exactly one address is the default whenever the book is not empty.
    """

    type: String(choices=AddressType, default=AddressType.HOME.value)
    street: String(required=True, max_length=255)
    city: String(required=True, max_length=100)
    state: String(required=True, max_length=100)
    zip_code: String(required=True, max_length=20)
    country: String(required=True, max_length=100, default="US")
    is_default: Boolean(default=False)


@storefront.aggregate
class User:
    """A registered account: credentials, profile, address book and lockout state."""

    name: String(required=True, max_length=50)
    email: String(required=True, max_length=254)
    password_hash: String(max_length=100)
    phone: String(max_length=17)
    avatar: String(max_length=500, default="default-avatar.jpg")
    role: String(choices=Role, default=Role.USER.value)
    is_email_verified: Boolean(default=False)
    email_verification_token: String(max_length=64)
    email_verification_expire: DateTime()
    reset_password_token: String(max_length=64)
    reset_password_expire: DateTime()
    addresses: HasMany(Address)
    preferences: ValueObject(Preferences)
    last_login: DateTime()
    login_attempts: Integer(default=0, min_value=0)
    lock_until: DateTime()
    created_at: DateTime(default=lambda: datetime.now(UTC))
    updated_at: DateTime(default=lambda: datetime.now(UTC))

    @invariant.post
    def email_must_be_valid(self):
        if self.email and not _EMAIL_PATTERN.match(self.email):
            raise ValidationError({"email": ["Please add a valid email"]})

    @invariant.post
    def phone_must_be_valid(self):
        if self.phone and not _PHONE_PATTERN.match(self.phone):
            raise ValidationError({"phone": ["Please add a valid phone number"]})

    @invariant.post
    def exactly_one_default_address_when_addresses_exist(self):
        if not self.addresses:
            return
        defaults = [a for a in self.addresses if a.is_default]
        if len(defaults) != 1:
            raise ValidationError({"addresses": ["Exactly one address must be marked as default"]})

    @classmethod
    def register(cls, name, email, password, phone=None, role=None):
        from storefront.identity.user.events import UserRegistered

        now = datetime.now(UTC)
        user = cls(
            name=name.strip() if name else name,
            email=email.strip().lower() if email else email,
            password_hash=hash_password(_validated_password(password)),
            phone=phone,
            role=role or Role.USER.value,
            preferences=Preferences(),
            login_attempts=0,
            created_at=now,
            updated_at=now,
        )
        user.raise_(
            UserRegistered(
                user_id=user.id,
                name=user.name,
                email=user.email,
                role=user.role,
                registered_at=now,
            )
        )
        return user

    # -------------------------------------------------------------------
    # Derived views
    # -------------------------------------------------------------------
    @property
    def default_address(self):
        default = next((a for a in self.addresses if a.is_default), None)
        return default or (self.addresses[0] if self.addresses else None)

    @property
    def is_admin(self):
        return self.role == Role.ADMIN.value

    # -------------------------------------------------------------------
    # Credentials & lockout
    # -------------------------------------------------------------------
    def match_password(self, password):
        return check_password(password, self.password_hash)

    def is_locked(self, now=None):
        now = now or datetime.now(UTC)
        return self.lock_until is not None and self.lock_until > now

    def register_failed_login(self, now=None):
        """Count a failed password check, locking the account once the limit is hit.

        A lock that has already run out is cleared and counting restarts at 1.
        """
        from storefront.identity.user.events import LoginFailed

        settings = get_settings()
        now = now or datetime.now(UTC)

        with atomic_change(self):
            if self.lock_until is not None and self.lock_until < now:
                self.lock_until = None
                self.login_attempts = 1
            else:
                attempts = (self.login_attempts or 0) + 1
                if attempts >= settings.max_login_attempts and not self.is_locked(now):
                    self.lock_until = now + timedelta(hours=settings.lock_duration_hours)
                self.login_attempts = attempts

        self.raise_(LoginFailed(user_id=self.id, attempts=self.login_attempts, locked_until=self.lock_until))

    def reset_login_attempts(self):
        with atomic_change(self):
            self.login_attempts = 0
            self.lock_until = None

    def record_login(self):
        from storefront.identity.user.events import UserLoggedIn

        now = datetime.now(UTC)
        self.reset_login_attempts()
        self.last_login = now
        self.raise_(UserLoggedIn(user_id=self.id, logged_in_at=now))

    def change_password(self, new_password):
        from storefront.identity.user.events import PasswordChanged

        now = datetime.now(UTC)
        self.password_hash = hash_password(_validated_password(new_password))
        self.updated_at = now
        self.raise_(PasswordChanged(user_id=self.id, changed_at=now))

    # -------------------------------------------------------------------
    # Tokens
    # -------------------------------------------------------------------
    def issue_password_reset_token(self):
        """Store a digest of a fresh reset token and return the raw token once."""
        from storefront.identity.user.events import PasswordResetRequested

        raw, digest = new_token()
        expires = datetime.now(UTC) + timedelta(minutes=get_settings().reset_token_ttl_minutes)

        with atomic_change(self):
            self.reset_password_token = digest
            self.reset_password_expire = expires

        self.raise_(PasswordResetRequested(user_id=self.id, expires_at=expires))
        return raw

    def reset_password(self, token, new_password):
        if (
            not self.reset_password_token
            or digest_token(token) != self.reset_password_token
            or self.reset_password_expire is None
            or self.reset_password_expire < datetime.now(UTC)
        ):
            raise ValidationError({"token": ["Invalid or expired reset token"]})

        self.change_password(new_password)
        with atomic_change(self):
            self.reset_password_token = None
            self.reset_password_expire = None
        self.reset_login_attempts()

    def issue_email_verification_token(self):
        from storefront.identity.user.events import EmailVerificationRequested

        raw, digest = new_token()
        expires = datetime.now(UTC) + timedelta(hours=get_settings().email_verification_ttl_hours)

        with atomic_change(self):
            self.email_verification_token = digest
            self.email_verification_expire = expires

        self.raise_(EmailVerificationRequested(user_id=self.id, email=self.email, expires_at=expires))
        return raw

    def verify_email(self, token):
        from storefront.identity.user.events import EmailVerified

        if (
            not self.email_verification_token
            or digest_token(token) != self.email_verification_token
            or self.email_verification_expire is None
            or self.email_verification_expire < datetime.now(UTC)
        ):
            raise ValidationError({"token": ["Invalid or expired verification token"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.is_email_verified = True
            self.email_verification_token = None
            self.email_verification_expire = None
            self.updated_at = now

        self.raise_(EmailVerified(user_id=self.id, email=self.email, verified_at=now))

    # -------------------------------------------------------------------
    # Profile & preferences
    # -------------------------------------------------------------------
    def update_profile(self, name=_UNSET, phone=_UNSET, avatar=_UNSET):
        from storefront.identity.user.events import ProfileUpdated

        with atomic_change(self):
            if name is not _UNSET:
                self.name = name
            if phone is not _UNSET:
                self.phone = phone
            if avatar is not _UNSET:
                self.avatar = avatar
            self.updated_at = datetime.now(UTC)

        self.raise_(ProfileUpdated(user_id=self.id, name=self.name, phone=self.phone, avatar=self.avatar))

    def update_preferences(self, **changes):
        from storefront.identity.user.events import PreferencesUpdated

        current = self.preferences.to_dict() if self.preferences else {}
        unknown = set(changes) - set(declared_fields(Preferences))
        if unknown:
            raise ValidationError({"preferences": [f"Unknown preferences: {', '.join(sorted(unknown))}"]})

        self.preferences = Preferences(**{**current, **changes})
        self.updated_at = datetime.now(UTC)

        self.raise_(
            PreferencesUpdated(
                user_id=self.id,
                language=self.preferences.language,
                currency=self.preferences.currency,
            )
        )

    # -------------------------------------------------------------------
    # Address book
    # -------------------------------------------------------------------
    def _address(self, address_id):
        address = next((a for a in self.addresses if str(a.id) == str(address_id)), None)
        if address is None:
            raise ValidationError({"addresses": [f"Address {address_id} not found"]})
        return address

    def add_address(self, street, city, state, zip_code, country="US", type=AddressType.HOME.value, is_default=False):
        from storefront.identity.user.events import AddressAdded

        # First address is always default
        if not self.addresses:
            is_default = True

        with atomic_change(self):
            if is_default:
                for addr in self.addresses:
                    if addr.is_default:
                        addr.is_default = False

            address = Address(
                type=type,
                street=street,
                city=city,
                state=state,
                zip_code=zip_code,
                country=country or "US",
                is_default=is_default,
            )
            self.add_addresses(address)

        self.raise_(
            AddressAdded(
                user_id=self.id,
                address_id=address.id,
                type=address.type,
                city=city,
                country=address.country,
                is_default=str(is_default),
            )
        )
        return address

    def remove_address(self, address_id):
        from storefront.identity.user.events import AddressRemoved

        address = self._address(address_id)

        with atomic_change(self):
            self.remove_addresses(address)
            # Hand the default flag to the first remaining address
            if address.is_default and self.addresses:
                self.addresses[0].is_default = True

        self.raise_(AddressRemoved(user_id=self.id, address_id=address_id))

    def set_default_address(self, address_id):
        from storefront.identity.user.events import DefaultAddressChanged

        address = self._address(address_id)
        previous_default = next((a for a in self.addresses if a.is_default), None)

        with atomic_change(self):
            for addr in self.addresses:
                if addr.is_default:
                    addr.is_default = False
            address.is_default = True

        self.raise_(
            DefaultAddressChanged(
                user_id=self.id,
                address_id=address_id,
                previous_default_address_id=previous_default.id if previous_default else None,
            )
        )
