"""Security utilities - password hashing, CSRF tokens, signed cookies"""

import base64
import hashlib
import hmac
import secrets
import string
from typing import Optional

import bcrypt

CSRF_TOKEN_LENGTH = 24
_CSRF_ALPHABET = string.ascii_letters + string.digits

# Prefix marking a signed cookie value
SIGNED_COOKIE_PREFIX = "s:"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash

    Args:
        plain_password: Plain text password
        hashed_password: Hashed password

    Returns:
        bool: True if password matches
    """
    return bcrypt.checkpw(
        plain_password.encode('utf-8'),
        hashed_password.encode('utf-8')
    )


def get_password_hash(password: str) -> str:
    """
    Hash a password using bcrypt

    Args:
        password: Plain text password

    Returns:
        str: Hashed password
    """
    return bcrypt.hashpw(
        password.encode('utf-8'),
        bcrypt.gensalt()
    ).decode('utf-8')


def generate_csrf_token(length: int = CSRF_TOKEN_LENGTH) -> str:
    """
    Generate CSRF token

    Returns:
        str: Random alphanumeric token
    """
    return "".join(secrets.choice(_CSRF_ALPHABET) for _ in range(length))


def _cookie_signature(value: str, secret: str) -> str:
    digest = hmac.new(
        secret.encode("utf-8"),
        value.encode("utf-8"),
        hashlib.sha256,
    ).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


def sign_cookie(value: str, secret: str) -> str:
    """
    Sign a cookie value

    Args:
        value: Raw cookie value
        secret: Cookie signing secret

    Returns:
        str: ``s:<value>.<signature>``
    """
    return f"{SIGNED_COOKIE_PREFIX}{value}.{_cookie_signature(value, secret)}"


def unsign_cookie(signed_value: Optional[str], secret: str) -> Optional[str]:
    """
    Verify a signed cookie value

    Args:
        signed_value: Value as received from the client
        secret: Cookie signing secret

    Returns:
        Optional[str]: Raw value, or None if missing or tampered with
    """
    if not signed_value or not signed_value.startswith(SIGNED_COOKIE_PREFIX):
        return None

    payload = signed_value[len(SIGNED_COOKIE_PREFIX):]
    value, sep, signature = payload.rpartition(".")
    if not sep or not value:
        return None

    if not hmac.compare_digest(signature, _cookie_signature(value, secret)):
        return None
    return value
