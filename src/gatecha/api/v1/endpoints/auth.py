# src/gatecha/api/v1/endpoints/auth.py
"""Admin login, session and runtime settings endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter

from gatecha.api.v1.dependencies import (
    CredentialManagerDep,
    CurrentAdminDep,
    SettingsStoreDep,
    VerificationGateDep,
)
from gatecha.core.errors import UnauthorizedError
from gatecha.schemas.admin import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SettingsResponse,
    SettingsUpdate,
)
from gatecha.schemas.api_key import StatusResponse

router = APIRouter(tags=["admin"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    manager: CredentialManagerDep,
    store: SettingsStoreDep,
    gate: VerificationGateDep,
) -> LoginResponse:
    """Exchange admin credentials for a bearer session.

    When the login challenge is enabled, a solution for the dedicated login
    key must accompany the credentials. It is checked by the same gate as
    public traffic, so it is single-use and counted in that key's stats.

    Raises:
        UnauthorizedError: On bad credentials or a missing or invalid challenge.
    """
    if not manager.validate(body.username, body.password):
        logger.info("Rejected admin login for %r", body.username)
        raise UnauthorizedError("invalid credentials")

    if store.login_captcha_enabled:
        if not body.captcha_payload:
            raise UnauthorizedError("captcha required")
        key = store.ensure_login_captcha_key()
        outcome = gate.verify(key, body.captcha_payload)
        if not outcome.ok:
            logger.info("Rejected admin login captcha: %s", outcome.error)
            raise UnauthorizedError("invalid captcha")

    session = manager.issue_session(body.username)
    return LoginResponse(token=session.token, expires_at=session.expires_at)


@router.get("/me", response_model=MeResponse)
async def me(username: CurrentAdminDep) -> MeResponse:
    return MeResponse(username=username)


@router.post("/change-password", response_model=StatusResponse)
def change_password(
    body: ChangePasswordRequest, username: CurrentAdminDep, manager: CredentialManagerDep
) -> StatusResponse:
    """Replace the admin password after re-checking the current one."""
    if not manager.validate(username, body.current_password):
        raise UnauthorizedError("invalid current password")
    manager.change_password(username, body.new_password)
    return StatusResponse(status="password changed")


@router.get("/settings", response_model=SettingsResponse)
async def get_settings(_: CurrentAdminDep, store: SettingsStoreDep) -> SettingsResponse:
    return SettingsResponse(login_captcha_enabled=store.login_captcha_enabled)


@router.put("/settings", response_model=SettingsResponse)
async def update_settings(
    body: SettingsUpdate, _: CurrentAdminDep, store: SettingsStoreDep
) -> SettingsResponse:
    """Toggle the login challenge. Enabling it creates the login key if needed."""
    if body.login_captcha_enabled is not None:
        store.set_login_captcha_enabled(body.login_captcha_enabled)
    return SettingsResponse(login_captcha_enabled=store.login_captcha_enabled)
