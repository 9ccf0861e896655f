"""Runtime key/value settings and the admin-login challenge key."""

from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from gatecha.core.errors import InternalError
from gatecha.core.settings import (
    LOGIN_KEY_ALGORITHM,
    LOGIN_KEY_EXPIRE_SECONDS,
    LOGIN_KEY_MAX_NUMBER,
    LOGIN_KEY_NAME,
)
from gatecha.db.session import dialect_insert
from gatecha.db.time import utcnow
from gatecha.models import APIKey, Setting
from gatecha.services.keys import KeyRegistry, get_key_registry

logger = logging.getLogger(__name__)

LOGIN_CAPTCHA_ENABLED = "login_captcha_enabled"
LOGIN_CAPTCHA_API_KEY_ID = "login_captcha_api_key_id"
ENSURE_ATTEMPTS = 3


class SettingsStore:
    """String settings with upsert semantics."""

    def __init__(self, db: Session, registry: KeyRegistry | None = None) -> None:
        self._db = db
        self.registry = registry or KeyRegistry(db)

    def get(self, key: str) -> str | None:
        """Return the stored value or None if the setting was never written."""
        return self._db.scalar(select(Setting.value).where(Setting.key == key))

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite a setting."""
        table = Setting.__table__
        now = utcnow()
        stmt = dialect_insert(self._db, table).values(key=key, value=value, updated_at=now)
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.key],
            set_={"value": stmt.excluded.value, "updated_at": stmt.excluded.updated_at},
        )
        self._db.execute(stmt)
        self._db.commit()

    @property
    def login_captcha_enabled(self) -> bool:
        return self.get(LOGIN_CAPTCHA_ENABLED) == "true"

    def set_login_captcha_enabled(self, enabled: bool) -> None:
        """Toggle the admin-login challenge, creating its key first when enabling."""
        if enabled:
            self.ensure_login_captcha_key()
        self.set(LOGIN_CAPTCHA_ENABLED, "true" if enabled else "false")

    def _resolve(self, stored: str | None) -> APIKey | None:
        if not stored:
            return None
        try:
            return self.registry.find(int(stored))
        except ValueError:
            logger.warning("Ignoring malformed %s=%r", LOGIN_CAPTCHA_API_KEY_ID, stored)
            return None

    def _swap_key_id(self, expected: str | None, new: str) -> bool:
        """Store ``new`` only if the setting still holds ``expected``."""
        table = Setting.__table__
        now = utcnow()
        if expected is None:
            stmt = (
                dialect_insert(self._db, table)
                .values(key=LOGIN_CAPTCHA_API_KEY_ID, value=new, updated_at=now)
                .on_conflict_do_nothing(index_elements=[table.c.key])
            )
        else:
            stmt = (
                update(table)
                .where(table.c.key == LOGIN_CAPTCHA_API_KEY_ID, table.c.value == expected)
                .values(value=new, updated_at=now)
            )
        result = self._db.execute(stmt)
        self._db.commit()
        return result.rowcount == 1

    def ensure_login_captcha_key(self) -> APIKey:
        """Return the dedicated login key, creating it if missing or deleted.

        Concurrent callers converge on a single key: the setting is written
        with compare-and-swap, and a caller that loses deletes the key it made.

        Raises:
            InternalError: If no key could be settled on.
        """
        for _ in range(ENSURE_ATTEMPTS):
            stored = self.get(LOGIN_CAPTCHA_API_KEY_ID)
            key = self._resolve(stored)
            if key is not None:
                return key

            key = self.registry.create(
                name=LOGIN_KEY_NAME,
                domain="",
                max_number=LOGIN_KEY_MAX_NUMBER,
                expire_seconds=LOGIN_KEY_EXPIRE_SECONDS,
                algorithm=LOGIN_KEY_ALGORITHM,
            )
            if self._swap_key_id(stored, str(key.id)):
                logger.info("Created login CAPTCHA key id=%s", key.id)
                return key
            self.registry.delete(key.id)

        raise InternalError("failed to create login captcha key")


def get_settings_store(db: Session) -> SettingsStore:
    """Return a settings store bound to ``db``."""
    return SettingsStore(db, get_key_registry(db))
