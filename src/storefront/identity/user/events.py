"""Domain events for the User aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="User")
class UserRegistered:
    """A new account was created."""

    __version__ = 1

    user_id: Identifier(required=True)
    name: String(required=True)
    email: String(required=True)
    role: String(required=True)
    registered_at: DateTime(required=True)


@storefront.event(part_of="User")
class ProfileUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    name: String(required=True)
    phone: String()
    avatar: String()


@storefront.event(part_of="User")
class UserLoggedIn:
    __version__ = 1

    user_id: Identifier(required=True)
    logged_in_at: DateTime(required=True)


@storefront.event(part_of="User")
class LoginFailed:
    """A password check failed; ``locked_until`` is set once the account locks."""

    __version__ = 1

    user_id: Identifier(required=True)
    attempts: Integer(required=True)
    locked_until: DateTime()


@storefront.event(part_of="User")
class PasswordResetRequested:
    __version__ = 1

    user_id: Identifier(required=True)
    expires_at: DateTime(required=True)


@storefront.event(part_of="User")
class PasswordChanged:
    __version__ = 1

    user_id: Identifier(required=True)
    changed_at: DateTime(required=True)


@storefront.event(part_of="User")
class EmailVerificationRequested:
    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True)
    expires_at: DateTime(required=True)


@storefront.event(part_of="User")
class EmailVerified:
    __version__ = 1

    user_id: Identifier(required=True)
    email: String(required=True)
    verified_at: DateTime(required=True)


@storefront.event(part_of="User")
class AddressAdded:
    """A new address was added to a user's address book."""

    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    type: String(required=True)
    city: String(required=True)
    country: String(required=True)
    is_default: String(required=True)


@storefront.event(part_of="User")
class AddressRemoved:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)


@storefront.event(part_of="User")
class DefaultAddressChanged:
    __version__ = 1

    user_id: Identifier(required=True)
    address_id: Identifier(required=True)
    previous_default_address_id: Identifier()


@storefront.event(part_of="User")
class PreferencesUpdated:
    __version__ = 1

    user_id: Identifier(required=True)
    language: String()
    currency: String()
