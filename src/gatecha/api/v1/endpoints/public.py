# src/gatecha/api/v1/endpoints/public.py
"""Unauthenticated configuration used by the dashboard login page."""

from __future__ import annotations

from fastapi import APIRouter

from gatecha.api.v1.dependencies import SettingsStoreDep
from gatecha.schemas.admin import LoginConfigResponse

router = APIRouter(tags=["public"])

CHALLENGE_PATH = "/api/v1/challenge"


@router.get("/login-config", response_model=LoginConfigResponse, response_model_exclude_none=True)
async def get_login_config(store: SettingsStoreDep) -> LoginConfigResponse:
    """Tell the login form whether a challenge is required and where to fetch it."""
    if not store.login_captcha_enabled:
        return LoginConfigResponse(captcha_required=False)

    key = store.ensure_login_captcha_key()
    return LoginConfigResponse(
        captcha_required=True,
        challenge_url=f"{CHALLENGE_PATH}?apiKey={key.key_id}",
    )
