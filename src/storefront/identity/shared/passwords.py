"""Password and one-time token hashing."""

import hashlib
import secrets

import bcrypt

from storefront.settings import get_settings


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def check_password(password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def new_token() -> tuple[str, str]:
    """Return ``(raw_token, digest)``. Only the digest is ever stored."""
    raw = secrets.token_hex(20)
    return raw, digest_token(raw)


def digest_token(raw: str) -> str:
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()
