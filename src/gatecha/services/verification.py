"""Verification of submitted challenge solutions.

A submission moves through decode, solution check, replay check and
consumption. Every rejection is reported through ``VerificationOutcome``
rather than raised, so callers can answer with a uniform response.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatecha.core import altcha
from gatecha.core.errors import InternalError
from gatecha.core.settings import MAX_EXPIRE_SECONDS
from gatecha.db.time import utcnow
from gatecha.models import APIKey
from gatecha.services.replay import ReplayLedger, get_replay_ledger
from gatecha.services.stats import UsageAccountant, get_usage_accountant

logger = logging.getLogger(__name__)

INVALID_PAYLOAD = "invalid_payload"
INVALID_SOLUTION = "invalid_solution"
ALREADY_USED = "already_used"


@dataclass(frozen=True)
class VerificationOutcome:
    """Result of a single submission."""

    ok: bool
    error: str | None = None

    @classmethod
    def rejected(cls, reason: str) -> VerificationOutcome:
        return cls(ok=False, error=reason)


def _ledger_expiry(key: APIKey, data: Mapping[str, Any]) -> datetime:
    """Keep a consumed challenge at least until the expiry signed into its salt.

    The key's lifetime may have been shortened since the challenge was issued.
    """
    now = utcnow()
    ttl = key.expire_seconds
    signed_expiry = altcha.salt_expiry(str(data["salt"]))
    if signed_expiry is not None:
        ttl = max(ttl, signed_expiry - int(now.timestamp()))
    return now + timedelta(seconds=min(ttl, MAX_EXPIRE_SECONDS))


class VerificationGate:
    """Checks a solution against a key and redeems it at most once."""

    def __init__(
        self,
        db: Session,
        ledger: ReplayLedger | None = None,
        accountant: UsageAccountant | None = None,
    ) -> None:
        self._db = db
        self.ledger = ledger or ReplayLedger(db)
        self.accountant = accountant or UsageAccountant(db)

    def verify(self, key: APIKey, payload: str | Mapping[str, Any]) -> VerificationOutcome:
        """Verify ``payload`` for ``key`` and consume its challenge on success.

        Raises:
            InternalError: If the replay ledger cannot be read.
        """
        try:
            data = altcha.decode_payload(payload)
        except ValueError:
            logger.debug("Rejected undecodable payload for key_id=%s", key.key_id)
            return self._reject(key, INVALID_PAYLOAD)

        if not altcha.verify(key.hmac_secret, data):
            logger.debug("Rejected invalid solution for key_id=%s", key.key_id)
            return self._reject(key, INVALID_SOLUTION)

        challenge = str(data["challenge"])
        try:
            consumed = self.ledger.is_consumed(challenge)
        except SQLAlchemyError as err:
            self._db.rollback()
            logger.error("Failed to check replay ledger for key_id=%s: %s", key.key_id, err)
            raise InternalError() from err
        if consumed:
            logger.debug("Rejected replayed challenge for key_id=%s", key.key_id)
            return self._reject(key, ALREADY_USED)

        expires_at = _ledger_expiry(key, data)
        try:
            inserted = self.ledger.mark_consumed(challenge, key.id, expires_at)
        except SQLAlchemyError as err:
            self._db.rollback()
            logger.error("Failed to mark challenge consumed for key_id=%s: %s", key.key_id, err)
        else:
            if not inserted:
                # A concurrent submission redeemed the same challenge first.
                logger.debug("Lost redemption race for key_id=%s", key.key_id)
                return self._reject(key, ALREADY_USED)

        self._account(key, self.accountant.increment_ok, "verifications_ok")
        logger.debug("Verified solution for key_id=%s", key.key_id)
        return VerificationOutcome(ok=True)

    def _reject(self, key: APIKey, reason: str) -> VerificationOutcome:
        self._account(key, self.accountant.increment_fail, "verifications_fail")
        return VerificationOutcome.rejected(reason)

    def _account(self, key: APIKey, increment, counter: str) -> None:
        try:
            increment(key.id)
        except SQLAlchemyError as err:
            self._db.rollback()
            logger.error("Failed to increment %s for key_id=%s: %s", counter, key.key_id, err)


def get_verification_gate(db: Session) -> VerificationGate:
    """Return a verification gate bound to ``db``."""
    return VerificationGate(db, get_replay_ledger(db), get_usage_accountant(db))
