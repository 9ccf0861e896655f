"""Per-key daily usage accounting."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from gatecha.db.session import dialect_insert
from gatecha.db.time import utctoday
from gatecha.models import APIKey, DailyStat

DEFAULT_DAYS = 30
MAX_DAYS = 3650
COUNTERS = ("challenges_issued", "verifications_ok", "verifications_fail")


@dataclass(frozen=True)
class DailyUsage:
    date: dt.date
    challenges_issued: int
    verifications_ok: int
    verifications_fail: int


@dataclass(frozen=True)
class KeyUsageSummary:
    api_key_id: int
    challenges_issued: int
    verifications_ok: int
    verifications_fail: int
    last_used_at: dt.date | None


@dataclass(frozen=True)
class UsageOverview:
    total_challenges: int
    total_verifications_ok: int
    total_verifications_fail: int
    active_keys: int
    daily: list[DailyUsage] = field(default_factory=list)


def normalize_days(days: int | None) -> int:
    """Return ``days`` capped at ``MAX_DAYS``; non-positive values mean the default."""
    if days is None or days <= 0:
        return DEFAULT_DAYS
    return min(days, MAX_DAYS)


class UsageAccountant:
    """Atomic per-day counters keyed by ``(api_key_id, date)``."""

    def __init__(self, db: Session) -> None:
        self._db = db

    def _increment(self, api_key_id: int, counter: str, day: dt.date | None = None) -> None:
        table = DailyStat.__table__
        values = {name: 0 for name in COUNTERS}
        values[counter] = 1
        stmt = dialect_insert(self._db, table).values(
            api_key_id=api_key_id, date=day or utctoday(), **values
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[table.c.api_key_id, table.c.date],
            set_={counter: table.c[counter] + 1},
        )
        self._db.execute(stmt)
        self._db.commit()

    def increment_issued(self, api_key_id: int, day: dt.date | None = None) -> None:
        self._increment(api_key_id, "challenges_issued", day)

    def increment_ok(self, api_key_id: int, day: dt.date | None = None) -> None:
        self._increment(api_key_id, "verifications_ok", day)

    def increment_fail(self, api_key_id: int, day: dt.date | None = None) -> None:
        self._increment(api_key_id, "verifications_fail", day)

    def overview(self, days: int | None = DEFAULT_DAYS) -> UsageOverview:
        """All-time totals, enabled key count and a per-date series across all keys.

        The series covers dates on or after ``today - days``, newest first.
        """
        totals = self._db.execute(
            select(*(func.coalesce(func.sum(DailyStat.__table__.c[name]), 0) for name in COUNTERS))
        ).one()
        active_keys = self._db.scalar(
            select(func.count()).select_from(APIKey).where(APIKey.enabled.is_(True))
        )

        since = utctoday() - dt.timedelta(days=normalize_days(days))
        rows = self._db.execute(
            select(
                DailyStat.date,
                func.sum(DailyStat.challenges_issued),
                func.sum(DailyStat.verifications_ok),
                func.sum(DailyStat.verifications_fail),
            )
            .where(DailyStat.date >= since)
            .group_by(DailyStat.date)
            .order_by(DailyStat.date.desc())
        ).all()

        return UsageOverview(
            total_challenges=int(totals[0]),
            total_verifications_ok=int(totals[1]),
            total_verifications_fail=int(totals[2]),
            active_keys=int(active_keys or 0),
            daily=[DailyUsage(row[0], int(row[1]), int(row[2]), int(row[3])) for row in rows],
        )

    def keys_summary(self) -> dict[int, KeyUsageSummary]:
        """All-time totals per key; ``last_used_at`` is the latest accounted day."""
        rows = self._db.execute(
            select(
                DailyStat.api_key_id,
                func.sum(DailyStat.challenges_issued),
                func.sum(DailyStat.verifications_ok),
                func.sum(DailyStat.verifications_fail),
                func.max(DailyStat.date),
            ).group_by(DailyStat.api_key_id)
        ).all()
        return {
            row[0]: KeyUsageSummary(
                api_key_id=row[0],
                challenges_issued=int(row[1]),
                verifications_ok=int(row[2]),
                verifications_fail=int(row[3]),
                last_used_at=row[4],
            )
            for row in rows
        }

    def key_series(self, api_key_id: int, days: int | None = DEFAULT_DAYS) -> list[DailyUsage]:
        """Daily rows for one key over the last ``days`` days, newest first."""
        since = utctoday() - dt.timedelta(days=normalize_days(days))
        rows = self._db.execute(
            select(
                DailyStat.date,
                DailyStat.challenges_issued,
                DailyStat.verifications_ok,
                DailyStat.verifications_fail,
            )
            .where(DailyStat.api_key_id == api_key_id, DailyStat.date >= since)
            .order_by(DailyStat.date.desc())
        ).all()
        return [DailyUsage(*row) for row in rows]


def get_usage_accountant(db: Session) -> UsageAccountant:
    """Return a usage accountant bound to ``db``."""
    return UsageAccountant(db)
