"""Challenge issuance bound to an API key's policy."""

from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from gatecha.core import altcha
from gatecha.core.errors import InternalError
from gatecha.models import APIKey
from gatecha.services.stats import UsageAccountant, get_usage_accountant

logger = logging.getLogger(__name__)


class ChallengeIssuer:
    """Creates signed challenges for a key and accounts for them."""

    def __init__(self, db: Session, accountant: UsageAccountant | None = None) -> None:
        self._db = db
        self.accountant = accountant or UsageAccountant(db)

    def issue(self, key: APIKey) -> altcha.Challenge:
        """Return a new challenge signed with the key's secret.

        Raises:
            InternalError: If the challenge could not be generated.
        """
        try:
            challenge = altcha.issue(
                key.hmac_secret, key.max_number, key.algorithm, key.expire_seconds
            )
        except (ValueError, OSError) as err:
            logger.error("Failed to create challenge for key_id=%s: %s", key.key_id, err)
            raise InternalError("failed to create challenge") from err

        try:
            self.accountant.increment_issued(key.id)
        except SQLAlchemyError as err:
            self._db.rollback()
            logger.error("Failed to increment challenges_issued for key_id=%s: %s", key.key_id, err)

        return challenge


def get_challenge_issuer(db: Session) -> ChallengeIssuer:
    """Return a challenge issuer bound to ``db``."""
    return ChallengeIssuer(db, get_usage_accountant(db))
