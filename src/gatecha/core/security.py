"""Password hashing and admin session token primitives."""
from __future__ import annotations

import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
from jose import JWTError, jwt

# bcrypt only considers the first 72 bytes of its input.
MAX_PASSWORD_BYTES = 72
KEY_ID_PREFIX = "gk_"
KEY_ID_BYTES = 12
SECRET_BYTES = 32


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``.

    Raises:
        ValueError: If the password is empty or longer than bcrypt accepts.
    """
    encoded = password.encode("utf-8")
    if not encoded or len(encoded) > MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be between 1 and {MAX_PASSWORD_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Return True if ``password`` matches ``password_hash``; never raises."""
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        return False


def generate_key_id() -> str:
    """Return a new public API key identifier such as ``gk_1f2e...``."""
    return KEY_ID_PREFIX + secrets.token_hex(KEY_ID_BYTES)


def generate_secret() -> str:
    """Return a new high-entropy key secret (hex)."""
    return secrets.token_hex(SECRET_BYTES)


def create_session_token(
    subject: str,
    secret_key: str,
    *,
    algorithm: str = "HS256",
    ttl: timedelta = timedelta(hours=24),
) -> tuple[str, datetime]:
    """Sign a bearer token for ``subject``.

    Returns:
        The encoded token and its expiry time.
    """
    issued_at = datetime.now(UTC)
    expires_at = issued_at + ttl
    claims: dict[str, Any] = {"sub": subject, "iat": issued_at, "exp": expires_at}
    token: str = jwt.encode(claims, secret_key, algorithm=algorithm)
    return token, expires_at


def decode_session_token(
    token: str, secret_key: str, *, algorithm: str = "HS256"
) -> dict[str, Any]:
    """Decode and validate a bearer token.

    Raises:
        JWTError: If the signature, algorithm or expiry is invalid, or the subject is missing.
    """
    claims: dict[str, Any] = jwt.decode(token, secret_key, algorithms=[algorithm])
    if not isinstance(claims.get("sub"), str) or not claims["sub"]:
        raise JWTError("Token has no subject")
    return claims
