"""Usage reporting schemas."""

import datetime as dt

from pydantic import BaseModel, ConfigDict


class DailyUsageResponse(BaseModel):
    date: dt.date
    challenges_issued: int
    verifications_ok: int
    verifications_fail: int

    model_config = ConfigDict(from_attributes=True)


class OverviewResponse(BaseModel):
    total_challenges: int
    total_verifications_ok: int
    total_verifications_fail: int
    active_keys: int
    daily: list[DailyUsageResponse]

    model_config = ConfigDict(from_attributes=True)


class KeyUsageResponse(BaseModel):
    api_key_id: int
    challenges_issued: int
    verifications_ok: int
    verifications_fail: int
    last_used_at: dt.date | None = None

    model_config = ConfigDict(from_attributes=True)


class KeysSummaryResponse(BaseModel):
    keys: dict[str, KeyUsageResponse]


class KeySeriesResponse(BaseModel):
    key_id: str
    name: str
    days: list[DailyUsageResponse]
