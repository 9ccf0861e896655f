# src/gatecha/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .admin import (
    ChangePasswordRequest,
    LoginConfigResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    SettingsResponse,
    SettingsUpdate,
)
from .api_key import (
    APIKeyCreate,
    APIKeyList,
    APIKeyResponse,
    APIKeyUpdate,
    RotateSecretResponse,
    StatusResponse,
)
from .challenge import ChallengeResponse, VerifyRequest, VerifyResponse
from .stats import (
    DailyUsageResponse,
    KeySeriesResponse,
    KeysSummaryResponse,
    KeyUsageResponse,
    OverviewResponse,
)

__all__ = [
    "APIKeyCreate", "APIKeyList", "APIKeyResponse", "APIKeyUpdate",
    "RotateSecretResponse", "StatusResponse",
    "ChallengeResponse", "VerifyRequest", "VerifyResponse",
    "ChangePasswordRequest", "LoginConfigResponse", "LoginRequest", "LoginResponse",
    "MeResponse", "SettingsResponse", "SettingsUpdate",
    "DailyUsageResponse", "KeySeriesResponse", "KeysSummaryResponse",
    "KeyUsageResponse", "OverviewResponse",
]
