"""Per-user vote and bookmark toggles.

The ``build_vote`` rows are the source of truth; the ``upvotes``/``downvotes``
columns on ``build`` are rewritten from a fresh count inside the same
transaction as every vote mutation, so concurrent toggles cannot drift them.
"""

from __future__ import annotations

import logging

from sqlalchemy import func
from sqlalchemy.orm import Session

from loadout_hub.models import Bookmark, Build, BuildStatus, BuildVote
from loadout_hub.models.ledger import VOTE_DOWN, VOTE_TYPES, VOTE_UP
from loadout_hub.schemas.vote import BookmarkState, VoteState
from loadout_hub.services.errors import NotFound, ValidationError, service_action
from loadout_hub.services.permissions import Viewer, require_user

logger = logging.getLogger(__name__)


def _get_visible_build_or_404(db: Session, build_id: int, viewer: Viewer) -> Build:
    build = db.query(Build).filter(Build.id == build_id).first()
    if build is None:
        raise NotFound("Build not found")
    if build.status != BuildStatus.VERIFIED.value and not viewer.can_view_unpublished(build.user_id):
        raise NotFound("Build not found")
    return build


def recompute_vote_counts(db: Session, build_id: int) -> tuple[int, int]:
    """Count ledger rows for ``build_id`` and write them to the build.

    Returns:
        ``(upvotes, downvotes)`` as stored after the update.
    """
    db.flush()
    rows = (
        db.query(BuildVote.vote_type, func.count())
        .filter(BuildVote.build_id == build_id)
        .group_by(BuildVote.vote_type)
        .all()
    )
    counts = dict(rows)
    upvotes = counts.get(VOTE_UP, 0)
    downvotes = counts.get(VOTE_DOWN, 0)
    db.query(Build).filter(Build.id == build_id).update(
        {Build.upvotes: upvotes, Build.downvotes: downvotes},
        synchronize_session="fetch",
    )
    return upvotes, downvotes


def apply_vote(db: Session, build_id: int, user_id: str, direction: str) -> str | None:
    """Apply one toggle step to the ledger and return the resulting vote."""
    existing = (
        db.query(BuildVote)
        .filter(BuildVote.build_id == build_id, BuildVote.user_id == user_id)
        .first()
    )
    if existing is None:
        db.add(BuildVote(user_id=user_id, build_id=build_id, vote_type=direction))
        return direction
    if existing.vote_type == direction:
        db.delete(existing)
        return None
    existing.vote_type = direction
    return direction


@service_action("toggle vote")
def toggle_vote(db: Session, build_id: int, direction: str, viewer: Viewer) -> VoteState:
    """Toggle the viewer's vote on a build.

    Voting the same direction twice clears the vote; voting the opposite
    direction switches it. Counters are recomputed before commit.
    """
    user_id = require_user(viewer)
    if direction not in VOTE_TYPES:
        raise ValidationError("Vote direction must be 'up' or 'down'.")
    _get_visible_build_or_404(db, build_id, viewer)

    user_vote = apply_vote(db, build_id, user_id, direction)
    upvotes, downvotes = recompute_vote_counts(db, build_id)
    db.commit()

    return VoteState(build_id=build_id, user_vote=user_vote, upvotes=upvotes, downvotes=downvotes)


@service_action("toggle bookmark")
def toggle_bookmark(db: Session, build_id: int, viewer: Viewer) -> BookmarkState:
    """Save or unsave a build for the viewer."""
    user_id = require_user(viewer)
    _get_visible_build_or_404(db, build_id, viewer)

    existing = (
        db.query(Bookmark)
        .filter(Bookmark.build_id == build_id, Bookmark.user_id == user_id)
        .first()
    )
    if existing is None:
        db.add(Bookmark(user_id=user_id, build_id=build_id))
        is_bookmarked = True
    else:
        db.delete(existing)
        is_bookmarked = False
    db.commit()

    return BookmarkState(build_id=build_id, is_bookmarked=is_bookmarked)


def count_bookmarks(db: Session, user_id: str) -> int:
    """Return how many builds ``user_id`` has saved."""
    return db.query(Bookmark).filter(Bookmark.user_id == user_id).count()
