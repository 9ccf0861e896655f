# tests/services/test_stats.py
"""Tests for per-day usage counters and reporting."""

from __future__ import annotations

from datetime import timedelta

from sqlalchemy.orm import Session

from gatecha.db.time import utctoday
from gatecha.models import APIKey
from gatecha.services.keys import KeyPatch, KeyRegistry
from gatecha.services.stats import DEFAULT_DAYS, MAX_DAYS, UsageAccountant, normalize_days


def test_increments_share_one_row_per_day(db_session: Session, api_key: APIKey) -> None:
    accountant = UsageAccountant(db_session)
    accountant.increment_issued(api_key.id)
    accountant.increment_issued(api_key.id)
    accountant.increment_ok(api_key.id)
    accountant.increment_fail(api_key.id)
    accountant.increment_fail(api_key.id)
    accountant.increment_fail(api_key.id)

    series = accountant.key_series(api_key.id)

    assert len(series) == 1
    assert series[0].date == utctoday()
    assert series[0].challenges_issued == 2
    assert series[0].verifications_ok == 1
    assert series[0].verifications_fail == 3


def test_separate_days_get_separate_rows(db_session: Session, api_key: APIKey) -> None:
    accountant = UsageAccountant(db_session)
    today = utctoday()
    accountant.increment_issued(api_key.id, day=today - timedelta(days=1))
    accountant.increment_issued(api_key.id, day=today)

    series = accountant.key_series(api_key.id)

    assert [row.date for row in series] == [today, today - timedelta(days=1)]


def test_key_series_respects_window(db_session: Session, api_key: APIKey) -> None:
    accountant = UsageAccountant(db_session)
    today = utctoday()
    accountant.increment_ok(api_key.id, day=today - timedelta(days=3))
    accountant.increment_ok(api_key.id, day=today - timedelta(days=10))

    assert len(accountant.key_series(api_key.id, days=5)) == 1
    assert len(accountant.key_series(api_key.id, days=30)) == 2


def test_overview_aggregates_across_keys(
    db_session: Session, registry: KeyRegistry, api_key: APIKey
) -> None:
    other = registry.create(name="other")
    disabled = registry.create(name="disabled")
    registry.update(disabled.id, KeyPatch(enabled=False))
    accountant = UsageAccountant(db_session)
    today = utctoday()
    old_day = today - timedelta(days=60)

    accountant.increment_issued(api_key.id)
    accountant.increment_issued(other.id)
    accountant.increment_ok(other.id)
    accountant.increment_fail(api_key.id, day=today - timedelta(days=1))
    accountant.increment_issued(api_key.id, day=old_day)

    overview = accountant.overview(days=30)

    assert overview.total_challenges == 3
    assert overview.total_verifications_ok == 1
    assert overview.total_verifications_fail == 1
    assert overview.active_keys == 2
    assert [day.date for day in overview.daily] == [today, today - timedelta(days=1)]
    assert overview.daily[0].challenges_issued == 2
    assert overview.daily[0].verifications_ok == 1


def test_overview_on_empty_store(db_session: Session) -> None:
    overview = UsageAccountant(db_session).overview()

    assert overview.total_challenges == 0
    assert overview.active_keys == 0
    assert overview.daily == []


def test_keys_summary(db_session: Session, registry: KeyRegistry, api_key: APIKey) -> None:
    other = registry.create(name="other")
    accountant = UsageAccountant(db_session)
    today = utctoday()
    accountant.increment_issued(api_key.id, day=today - timedelta(days=2))
    accountant.increment_ok(api_key.id, day=today)
    accountant.increment_fail(other.id, day=today - timedelta(days=5))

    summary = accountant.keys_summary()

    assert set(summary) == {api_key.id, other.id}
    assert summary[api_key.id].challenges_issued == 1
    assert summary[api_key.id].verifications_ok == 1
    assert summary[api_key.id].last_used_at == today
    assert summary[other.id].verifications_fail == 1
    assert summary[other.id].last_used_at == today - timedelta(days=5)


def test_normalize_days() -> None:
    assert normalize_days(7) == 7
    assert normalize_days(0) == DEFAULT_DAYS
    assert normalize_days(-4) == DEFAULT_DAYS
    assert normalize_days(None) == DEFAULT_DAYS
    assert normalize_days(MAX_DAYS + 1) == MAX_DAYS
    assert normalize_days(10**12) == MAX_DAYS
