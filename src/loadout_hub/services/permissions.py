"""Per-request viewer identity and role resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loadout_hub.models import Profile
from loadout_hub.services.errors import AuthRequired, Unauthorized

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Viewer:
    """Resolved identity and role flags of the caller.

    Built once per request by :func:`resolve_viewer` and passed explicitly into
    every service call. Admin and moderator are tracked separately for badges,
    but both grant the same moderation capabilities.
    """

    user_id: str | None = None
    is_admin: bool = False
    is_moderator: bool = False
    is_streamer: bool = False
    can_post_as_streamer: bool = False

    @classmethod
    def anonymous(cls) -> Viewer:
        """Return a viewer with no identity and no roles."""
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None

    @property
    def is_staff(self) -> bool:
        """True for moderators and admins."""
        return self.is_admin or self.is_moderator

    @property
    def can_edit(self) -> bool:
        """Only staff may edit build content; owners may only delete."""
        return self.is_staff

    def is_owner(self, owner_id: str | None) -> bool:
        """Return True if the viewer owns a record authored by ``owner_id``."""
        return self.user_id is not None and owner_id is not None and self.user_id == owner_id

    def can_delete(self, owner_id: str | None) -> bool:
        """Owners and staff may delete a build."""
        return self.is_owner(owner_id) or self.is_staff

    def can_view_unpublished(self, owner_id: str | None) -> bool:
        """Pending and rejected builds are visible to their owner and to staff."""
        return self.is_owner(owner_id) or self.is_staff


def resolve_viewer(db: Session, user_id: str | None) -> Viewer:
    """Fetch the caller's role flags once.

    Args:
        db: Database session
        user_id: Identity from the session provider, or None for anonymous callers

    Returns:
        Viewer bundle. If the profile cannot be loaded the identity is kept but
        no roles are granted.
    """
    if not user_id:
        return Viewer.anonymous()

    try:
        profile = db.get(Profile, user_id)
    except SQLAlchemyError as exc:
        logger.warning("Role lookup failed for %s: %s", user_id, exc)
        return Viewer(user_id=user_id)

    if profile is None:
        return Viewer(user_id=user_id)

    return Viewer(
        user_id=profile.id,
        is_admin=profile.is_admin,
        is_moderator=profile.is_moderator,
        is_streamer=profile.is_streamer,
        can_post_as_streamer=profile.can_post_as_streamer,
    )


def require_user(viewer: Viewer) -> str:
    """Return the viewer's id or raise :class:`AuthRequired`."""
    if viewer.user_id is None:
        raise AuthRequired()
    return viewer.user_id


def require_staff(viewer: Viewer) -> str:
    """Require a moderator or admin."""
    user_id = require_user(viewer)
    if not viewer.is_staff:
        raise Unauthorized("Unauthorized")
    return user_id


def require_admin(viewer: Viewer) -> str:
    """Require an admin."""
    user_id = require_user(viewer)
    if not viewer.is_admin:
        raise Unauthorized("Unauthorized: Admins only")
    return user_id
