"""Schemas for admin authentication and runtime settings."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field


class LoginRequest(BaseModel):
    """Admin login submission with an optional solved challenge."""

    username: str = ""
    password: str = ""
    captcha_payload: str | None = Field(
        None,
        validation_alias=AliasChoices("captcha_payload", "captchaPayload", "altcha_payload"),
        description="Solution for the login challenge when it is enabled",
    )


class LoginResponse(BaseModel):
    token: str
    expires_at: datetime


class MeResponse(BaseModel):
    username: str


class ChangePasswordRequest(BaseModel):
    current_password: str = ""
    new_password: str = ""


class SettingsResponse(BaseModel):
    login_captcha_enabled: bool


class SettingsUpdate(BaseModel):
    login_captcha_enabled: bool | None = None


class LoginConfigResponse(BaseModel):
    """Tells the dashboard whether the login form must embed a challenge."""

    captcha_required: bool
    challenge_url: str | None = None
