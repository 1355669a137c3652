"""SQLAlchemy models for the Loadout Hub application."""

from .build import BUILD_STATUSES, Build, BuildStatus
from .ledger import VOTE_TYPES, Bookmark, BuildVote
from .profile import Profile
from .weapon import Weapon

__all__ = [
    "BUILD_STATUSES", "Build", "BuildStatus",
    "VOTE_TYPES", "Bookmark", "BuildVote",
    "Profile",
    "Weapon",
]
