# tests/services/test_reaper.py
"""Tests for the background ledger purge."""

from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
from pytest_mock import MockerFixture
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker

from gatecha.db.time import utcnow
from gatecha.models import APIKey
from gatecha.services.reaper import Reaper
from gatecha.services.replay import ReplayLedger


def _seed(db_session: Session, api_key: APIKey) -> ReplayLedger:
    ledger = ReplayLedger(db_session)
    now = utcnow()
    ledger.mark_consumed("expired", api_key.id, now - timedelta(seconds=5))
    ledger.mark_consumed("future", api_key.id, now + timedelta(minutes=5))
    return ledger


@pytest.mark.asyncio
async def test_run_once_purges_expired(
    db_session: Session, session_factory: sessionmaker[Session], api_key: APIKey
) -> None:
    ledger = _seed(db_session, api_key)
    reaper = Reaper(interval_seconds=60, session_factory=session_factory)

    removed = await reaper.run_once()

    assert removed == 1
    assert ledger.is_consumed("expired") is False
    assert ledger.is_consumed("future") is True


@pytest.mark.asyncio
async def test_loop_purges_on_interval_and_stops(
    db_session: Session,
    session_factory: sessionmaker[Session],
    api_key: APIKey,
    mocker: MockerFixture,
) -> None:
    ledger = _seed(db_session, api_key)
    reaper = Reaper(interval_seconds=0.05, session_factory=session_factory)
    purge = mocker.spy(reaper, "purge_once")

    await reaper.start()
    assert reaper.running is True
    for _ in range(100):
        if purge.spy_return is not None:
            break
        await asyncio.sleep(0.02)
    await reaper.stop()

    assert purge.call_count >= 1
    assert reaper.running is False
    assert ledger.is_consumed("expired") is False
    assert ledger.is_consumed("future") is True


@pytest.mark.asyncio
async def test_stop_before_first_tick_does_not_purge(
    db_session: Session, session_factory: sessionmaker[Session], api_key: APIKey
) -> None:
    ledger = _seed(db_session, api_key)
    reaper = Reaper(interval_seconds=3600, session_factory=session_factory)

    await reaper.start()
    await reaper.stop()

    assert ledger.is_consumed("expired") is True


@pytest.mark.asyncio
async def test_stop_without_start_is_a_no_op(session_factory: sessionmaker[Session]) -> None:
    await Reaper(interval_seconds=1, session_factory=session_factory).stop()


@pytest.mark.asyncio
async def test_purge_failure_is_logged_and_loop_survives(
    session_factory: sessionmaker[Session], mocker: MockerFixture
) -> None:
    reaper = Reaper(interval_seconds=0.01, session_factory=session_factory)
    purge = mocker.patch.object(
        reaper, "purge_once", side_effect=OperationalError("stmt", {}, Exception("locked"))
    )

    await reaper.start()
    for _ in range(100):
        if purge.call_count >= 2:
            break
        await asyncio.sleep(0.01)
    await reaper.stop()

    assert purge.call_count >= 2
