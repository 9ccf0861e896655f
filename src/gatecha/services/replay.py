"""Replay protection for solved challenges."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, exists, select
from sqlalchemy.orm import Session

from gatecha.db.session import dialect_insert
from gatecha.db.time import utcnow
from gatecha.models import ConsumedChallenge


class ReplayLedger:
    """Ledger of consumed challenge digests enforcing at-most-once redemption.

    Uniqueness is global: a challenge value consumed under one key cannot be
    consumed under any other key.
    """

    def __init__(self, db: Session) -> None:
        self._db = db

    def is_consumed(self, challenge: str) -> bool:
        """Return True if ``challenge`` has already been redeemed."""
        stmt = select(exists().where(ConsumedChallenge.challenge == challenge))
        return bool(self._db.scalar(stmt))

    def mark_consumed(self, challenge: str, api_key_id: int, expires_at: datetime) -> bool:
        """Insert ``challenge`` unless it is already present.

        Returns:
            True if this call inserted the row, False if it already existed.
            Concurrent callers for the same value are resolved by the unique
            index, so exactly one of them observes True.
        """
        stmt = (
            dialect_insert(self._db, ConsumedChallenge.__table__)
            .values(
                challenge=challenge,
                api_key_id=api_key_id,
                expires_at=expires_at,
                consumed_at=utcnow(),
            )
            .on_conflict_do_nothing(index_elements=["challenge"])
        )
        result = self._db.execute(stmt)
        self._db.commit()
        return result.rowcount == 1

    def purge_expired(self, now: datetime | None = None) -> int:
        """Delete every row whose expiry has passed in one statement; return the count."""
        cutoff = now or utcnow()
        stmt = (
            delete(ConsumedChallenge)
            .where(ConsumedChallenge.expires_at < cutoff)
            .execution_options(synchronize_session=False)
        )
        result = self._db.execute(stmt)
        self._db.commit()
        return int(result.rowcount or 0)


def get_replay_ledger(db: Session) -> ReplayLedger:
    """Return a replay ledger bound to ``db``."""
    return ReplayLedger(db)
