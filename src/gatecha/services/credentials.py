"""Admin credentials and bearer sessions."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import lru_cache
from typing import Any

from jose import JWTError
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from gatecha.core import security
from gatecha.core.errors import NotFoundError, UnauthorizedError, ValidationError
from gatecha.core.settings import Settings, settings
from gatecha.db.session import dialect_insert
from gatecha.db.time import utcnow
from gatecha.models import AdminUser

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def _dummy_hash() -> str:
    # Compared against for unknown usernames so both paths cost one bcrypt check.
    return security.hash_password(security.generate_secret()[:32])


@dataclass(frozen=True)
class SessionToken:
    token: str
    expires_at: datetime


class CredentialManager:
    """Stores the admin password and issues signed sessions."""

    def __init__(self, db: Session, config: Settings | None = None) -> None:
        self._db = db
        self.config = config or settings

    def ensure_admin(self, username: str, password: str) -> bool:
        """Create the admin account on first boot.

        Returns:
            True if an account was created, False if one already existed.
        """
        if self._db.scalar(select(func.count()).select_from(AdminUser)):
            return False
        table = AdminUser.__table__
        now = utcnow()
        stmt = (
            dialect_insert(self._db, table)
            .values(
                username=username,
                password_hash=security.hash_password(password),
                created_at=now,
                updated_at=now,
            )
            .on_conflict_do_nothing(index_elements=[table.c.username])
        )
        result = self._db.execute(stmt)
        self._db.commit()
        created = result.rowcount == 1
        if created:
            logger.info("Created admin user %r", username)
        return created

    def _get(self, username: str) -> AdminUser | None:
        return self._db.scalars(select(AdminUser).where(AdminUser.username == username)).first()

    def validate(self, username: str, password: str) -> bool:
        """Return True if the credentials match; unknown users simply fail."""
        user = self._get(username)
        if user is None:
            security.verify_password(password, _dummy_hash())
            return False
        return security.verify_password(password, user.password_hash)

    def change_password(self, username: str, new_password: str) -> None:
        """Replace the admin's password hash.

        Raises:
            ValidationError: If the new password is empty or too long.
            NotFoundError: If the user does not exist.
        """
        user = self._get(username)
        if user is None:
            raise NotFoundError("user not found")
        try:
            user.password_hash = security.hash_password(new_password)
        except ValueError as err:
            raise ValidationError(
                f"password must be 1 to {security.MAX_PASSWORD_BYTES} bytes"
            ) from err
        user.updated_at = utcnow()
        self._db.commit()
        logger.info("Changed password for admin user %r", username)

    def issue_session(self, username: str) -> SessionToken:
        token, expires_at = security.create_session_token(
            username,
            self.config.secret_key,
            algorithm=self.config.jwt_algorithm,
            ttl=timedelta(hours=self.config.session_ttl_hours),
        )
        return SessionToken(token=token, expires_at=expires_at)

    def validate_session(self, token: str) -> dict[str, Any]:
        """Return the token's claims.

        Raises:
            UnauthorizedError: If the token is malformed, forged, signed with an
                unexpected algorithm, or expired.
        """
        try:
            return security.decode_session_token(
                token, self.config.secret_key, algorithm=self.config.jwt_algorithm
            )
        except JWTError as err:
            raise UnauthorizedError("invalid or expired token") from err


def get_credential_manager(db: Session) -> CredentialManager:
    """Return a credential manager bound to ``db``."""
    return CredentialManager(db)
