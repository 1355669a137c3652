# src/loadout_hub/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .builds import router as builds_router
from .moderation import router as moderation_router
from .system import router as system_router
from .users import router as users_router
from .weapons import router as weapons_router

__all__ = [
    "builds_router",
    "moderation_router",
    "system_router",
    "users_router",
    "weapons_router",
]
