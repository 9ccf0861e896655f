# src/gatecha/api/v1/endpoints/stats.py
"""Usage reporting for the authenticated admin."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from gatecha.api.v1.dependencies import (
    CurrentAdminDep,
    KeyIdPath,
    KeyRegistryDep,
    UsageAccountantDep,
)
from gatecha.schemas.stats import (
    DailyUsageResponse,
    KeySeriesResponse,
    KeysSummaryResponse,
    KeyUsageResponse,
    OverviewResponse,
)
from gatecha.services.stats import DEFAULT_DAYS, normalize_days

router = APIRouter(prefix="/stats", tags=["stats"])


def parse_days(days: Annotated[str | None, Query()] = None) -> int:
    """Read the ``days`` window; non-integers mean the default, large values are capped."""
    try:
        value = int(days) if days is not None else DEFAULT_DAYS
    except ValueError:
        return DEFAULT_DAYS
    return normalize_days(value)


@router.get("/overview", response_model=OverviewResponse)
async def get_overview(
    _: CurrentAdminDep,
    accountant: UsageAccountantDep,
    days: Annotated[int, Depends(parse_days)],
) -> OverviewResponse:
    return OverviewResponse.model_validate(accountant.overview(days))


@router.get("/keys-summary", response_model=KeysSummaryResponse)
async def get_keys_summary(
    _: CurrentAdminDep, accountant: UsageAccountantDep
) -> KeysSummaryResponse:
    """All-time totals per key, keyed by the key's internal id."""
    summary = accountant.keys_summary()
    return KeysSummaryResponse(
        keys={
            str(api_key_id): KeyUsageResponse.model_validate(row)
            for api_key_id, row in summary.items()
        }
    )


@router.get("/keys/{key_id}", response_model=KeySeriesResponse)
async def get_key_stats(
    key_id: KeyIdPath,
    _: CurrentAdminDep,
    registry: KeyRegistryDep,
    accountant: UsageAccountantDep,
    days: Annotated[int, Depends(parse_days)],
) -> KeySeriesResponse:
    key = registry.get(key_id)
    series = accountant.key_series(key.id, days)
    return KeySeriesResponse(
        key_id=key.key_id,
        name=key.name,
        days=[DailyUsageResponse.model_validate(row) for row in series],
    )
