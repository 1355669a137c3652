# src/loadout_hub/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    builds_router,
    moderation_router,
    system_router,
    users_router,
    weapons_router,
)

__all__ = [
    "builds_router",
    "moderation_router",
    "system_router",
    "users_router",
    "weapons_router",
]
