# src/gatecha/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    auth_router,
    challenge_router,
    keys_router,
    public_router,
    stats_router,
    system_router,
)

__all__ = [
    "auth_router",
    "challenge_router",
    "keys_router",
    "public_router",
    "stats_router",
    "system_router",
]
