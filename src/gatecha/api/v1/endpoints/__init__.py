# src/gatecha/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .challenge import router as challenge_router
from .keys import router as keys_router
from .public import router as public_router
from .stats import router as stats_router
from .system import router as system_router

__all__ = [
    "auth_router",
    "challenge_router",
    "keys_router",
    "public_router",
    "stats_router",
    "system_router",
]
