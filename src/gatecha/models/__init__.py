# src/gatecha/models/__init__.py
"""SQLAlchemy models for the GateCHA gateway."""

from .admin_user import AdminUser
from .api_key import APIKey
from .consumed_challenge import ConsumedChallenge
from .daily_stat import DailyStat
from .setting import Setting

__all__ = [
    "AdminUser",
    "APIKey",
    "ConsumedChallenge",
    "DailyStat",
    "Setting",
]
