"""Proof-of-work challenge primitive.

Challenges follow the ALTCHA wire format so that stock browser widgets can
solve them: the client searches for ``number`` in ``[0, maxnumber]`` such that
``H(salt + str(number))`` equals ``challenge``. The server never stores the
challenge; instead ``signature = HMAC_H(secret, challenge)`` binds it to the
issuing key, and the expiry is carried inside the salt as a query parameter.

This module knows nothing about keys, storage or HTTP.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
import secrets
import time
from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any
from urllib.parse import parse_qs

HASH_FUNCTIONS = {
    "SHA-1": hashlib.sha1,
    "SHA-256": hashlib.sha256,
    "SHA-512": hashlib.sha512,
}
SALT_BYTES = 12
PAYLOAD_FIELDS = ("algorithm", "challenge", "number", "salt", "signature")


@dataclass(frozen=True)
class Challenge:
    """Challenge envelope handed to clients."""

    algorithm: str
    challenge: str
    maxnumber: int
    salt: str
    signature: str

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _hash_function(algorithm: str):
    try:
        return HASH_FUNCTIONS[algorithm.upper()]
    except (KeyError, AttributeError) as err:
        raise ValueError(f"Unsupported algorithm: {algorithm!r}") from err


def hash_hex(algorithm: str, data: str) -> str:
    """Return the hex digest of ``data`` under ``algorithm``."""
    return _hash_function(algorithm)(data.encode()).hexdigest()


def hmac_hex(algorithm: str, secret: str, data: str) -> str:
    """Return the hex HMAC of ``data`` keyed by ``secret``."""
    return hmac.new(secret.encode(), data.encode(), _hash_function(algorithm)).hexdigest()


def salt_expiry(salt: str) -> int | None:
    """Extract the ``expires`` unix timestamp embedded in a salt, if any."""
    _, sep, query = salt.partition("?")
    if not sep:
        return None
    values = parse_qs(query).get("expires")
    if not values:
        return None
    try:
        return int(values[0])
    except ValueError:
        return None


def issue(secret: str, max_number: int, algorithm: str, ttl: int) -> Challenge:
    """Create a signed challenge.

    Args:
        secret: Key secret used for the HMAC signature.
        max_number: Upper bound (inclusive) of the secret number.
        algorithm: One of ``SHA-1``, ``SHA-256``, ``SHA-512``.
        ttl: Seconds until the challenge expires.

    Raises:
        ValueError: If the algorithm is unsupported or ``max_number`` is not positive.
    """
    if max_number <= 0:
        raise ValueError("max_number must be positive")
    algorithm = algorithm.upper()
    expires = int(time.time()) + int(ttl)
    salt = f"{secrets.token_hex(SALT_BYTES)}?expires={expires}"
    number = secrets.randbelow(max_number + 1)
    challenge = hash_hex(algorithm, salt + str(number))
    return Challenge(
        algorithm=algorithm,
        challenge=challenge,
        maxnumber=max_number,
        salt=salt,
        signature=hmac_hex(algorithm, secret, challenge),
    )


def decode_payload(payload: str | Mapping[str, Any]) -> dict[str, Any]:
    """Decode a base64 JSON solution payload.

    Raises:
        ValueError: If the payload is not standard base64, not JSON, or not an object.
    """
    if isinstance(payload, Mapping):
        return dict(payload)
    try:
        raw = base64.b64decode(payload, validate=True)
        data = json.loads(raw)
    except (binascii.Error, UnicodeDecodeError, json.JSONDecodeError) as err:
        raise ValueError(f"Invalid payload: {err}") from err
    if not isinstance(data, dict):
        raise ValueError("Invalid payload: expected a JSON object")
    return data


def verify(secret: str, payload: str | Mapping[str, Any], check_expires: bool = True) -> bool:
    """Return True if ``payload`` is a correct, unexpired solution signed by ``secret``.

    Never raises for malformed input.
    """
    try:
        data = decode_payload(payload)
    except ValueError:
        return False
    if any(data.get(field) is None for field in PAYLOAD_FIELDS):
        return False

    algorithm = str(data["algorithm"])
    salt = str(data["salt"])
    challenge = str(data["challenge"])
    signature = str(data["signature"])
    number = data["number"]
    if isinstance(number, bool) or not isinstance(number, int) or number < 0:
        return False

    if check_expires:
        expires = salt_expiry(salt)
        if expires is not None and expires < int(time.time()):
            return False

    try:
        expected_challenge = hash_hex(algorithm, salt + str(number))
        expected_signature = hmac_hex(algorithm, secret, challenge)
    except ValueError:
        return False

    return hmac.compare_digest(expected_challenge, challenge) and hmac.compare_digest(
        expected_signature, signature
    )
