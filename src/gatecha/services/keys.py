"""API key lifecycle and per-key challenge policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from gatecha.core import altcha
from gatecha.core.errors import NotFoundError, ValidationError
from gatecha.core.security import generate_key_id, generate_secret
from gatecha.core.settings import (
    DEFAULT_ALGORITHM,
    DEFAULT_EXPIRE_SECONDS,
    DEFAULT_MAX_NUMBER,
    MAX_EXPIRE_SECONDS,
    MAX_MAX_NUMBER,
)
from gatecha.db.time import utcnow
from gatecha.models import APIKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyPatch:
    """Partial update for an API key.

    ``None`` means "not provided". Provided strings must be non-empty and
    provided numbers positive to take effect; booleans always apply.
    """

    name: str | None = None
    domain: str | None = None
    max_number: int | None = None
    expire_seconds: int | None = None
    algorithm: str | None = None
    enabled: bool | None = None


def _normalize_algorithm(algorithm: str | None) -> str:
    if not algorithm:
        return DEFAULT_ALGORITHM
    normalized = algorithm.strip().upper()
    if normalized not in altcha.HASH_FUNCTIONS:
        raise ValidationError(f"unsupported algorithm: {algorithm}")
    return normalized


def _policy_value(field: str, value: int | None, default: int, upper: int) -> int:
    """Return ``value`` if positive, else ``default``.

    Raises:
        ValidationError: If ``value`` exceeds ``upper``.
    """
    if value is None or value <= 0:
        return default
    if value > upper:
        raise ValidationError(f"{field} must be at most {upper}")
    return value


class KeyRegistry:
    """Owns creation, lookup, update, deletion and secret rotation of API keys."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def create(
        self,
        name: str = "",
        domain: str = "",
        max_number: int | None = None,
        expire_seconds: int | None = None,
        algorithm: str | None = None,
    ) -> APIKey:
        """Create a key with a fresh public id and secret; non-positive values use defaults."""
        now = utcnow()
        key = APIKey(
            key_id=generate_key_id(),
            hmac_secret=generate_secret(),
            name=name or "",
            domain=(domain or "").strip(),
            max_number=_policy_value("max_number", max_number, DEFAULT_MAX_NUMBER, MAX_MAX_NUMBER),
            expire_seconds=_policy_value(
                "expire_seconds", expire_seconds, DEFAULT_EXPIRE_SECONDS, MAX_EXPIRE_SECONDS
            ),
            algorithm=_normalize_algorithm(algorithm),
            enabled=True,
            created_at=now,
            updated_at=now,
        )
        self._db.add(key)
        self._db.commit()
        self._db.refresh(key)
        logger.info("Created API key id=%s key_id=%s", key.id, key.key_id)
        return key

    def get(self, id_: int) -> APIKey:
        """Return the key with internal id ``id_``.

        Raises:
            NotFoundError: If no such key exists.
        """
        key = self._db.get(APIKey, id_)
        if key is None:
            raise NotFoundError("key not found")
        return key

    def find(self, id_: int) -> APIKey | None:
        """Return the key with internal id ``id_`` or None."""
        return self._db.get(APIKey, id_)

    def get_by_key_id(self, key_id: str) -> APIKey:
        """Return the key with public id ``key_id``.

        Raises:
            NotFoundError: If no such key exists.
        """
        key = self._db.scalars(select(APIKey).where(APIKey.key_id == key_id)).first()
        if key is None:
            raise NotFoundError("key not found")
        return key

    def list_all(self) -> list[APIKey]:
        """Return all keys, newest first."""
        stmt = select(APIKey).order_by(APIKey.created_at.desc(), APIKey.id.desc())
        return list(self._db.scalars(stmt))

    def update(self, id_: int, patch: KeyPatch) -> APIKey:
        """Apply ``patch`` to the key, preserving every field it does not meaningfully set."""
        key = self.get(id_)
        max_number = _policy_value("max_number", patch.max_number, key.max_number, MAX_MAX_NUMBER)
        expire_seconds = _policy_value(
            "expire_seconds", patch.expire_seconds, key.expire_seconds, MAX_EXPIRE_SECONDS
        )
        algorithm = _normalize_algorithm(patch.algorithm) if patch.algorithm else key.algorithm

        if patch.name:
            key.name = patch.name
        if patch.domain:
            key.domain = patch.domain.strip()
        key.max_number = max_number
        key.expire_seconds = expire_seconds
        key.algorithm = algorithm
        if patch.enabled is not None:
            key.enabled = patch.enabled
        key.updated_at = utcnow()
        self._db.commit()
        self._db.refresh(key)
        return key

    def delete(self, id_: int) -> None:
        """Delete the key and, by cascade, its ledger and stats rows. Missing ids are ignored."""
        key = self._db.get(APIKey, id_)
        if key is None:
            return
        self._db.delete(key)
        self._db.commit()
        logger.info("Deleted API key id=%s", id_)

    def rotate_secret(self, id_: int) -> str:
        """Replace the key's secret and return the new value.

        Challenges signed with the previous secret stop verifying immediately.
        """
        key = self.get(id_)
        key.hmac_secret = generate_secret()
        key.updated_at = utcnow()
        self._db.commit()
        logger.info("Rotated secret for API key id=%s", id_)
        return key.hmac_secret


def get_key_registry(db: Session) -> KeyRegistry:
    """Return a key registry bound to ``db``."""
    return KeyRegistry(db)
