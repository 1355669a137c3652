# src/loadout_hub/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .build import (
    BuildCreate,
    BuildCreated,
    BuildPage,
    BuildStats,
    BuildUpdate,
    ProjectedBuild,
    StatusChange,
)
from .filters import BuildFilters
from .profile import (
    ProfileStats,
    ProfileUpdate,
    ProfileView,
    RoleUpdate,
    StreamerLinkRequest,
    UserSummary,
)
from .stats import SiteStats
from .vote import BookmarkState, VoteRequest, VoteState
from .weapon import WeaponOut

__all__ = [
    "BuildCreate", "BuildCreated", "BuildPage", "BuildStats", "BuildUpdate",
    "ProjectedBuild", "StatusChange",
    "BuildFilters",
    "ProfileStats", "ProfileUpdate", "ProfileView", "RoleUpdate",
    "StreamerLinkRequest", "UserSummary",
    "SiteStats",
    "BookmarkState", "VoteRequest", "VoteState",
    "WeaponOut",
]
