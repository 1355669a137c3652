"""Map stored build rows to the viewer-facing build shape.

:func:`project` is the single implementation of the presentation rules
(title and image fallbacks, derived "Streamer Build" tag, viewer vote and
bookmark state, permission flags). Every code path that returns a build goes
through it.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.orm import Session

from loadout_hub.models import Bookmark, Build, BuildVote, Profile, Weapon
from loadout_hub.schemas.build import STAT_FIELDS, STREAMER_BUILD_TAG, BuildStats, ProjectedBuild
from loadout_hub.services.permissions import Viewer

UNKNOWN_AUTHOR = "Unknown"


@dataclass(frozen=True)
class BuildRow:
    """Stored build plus the joined author and weapon fields it is shown with."""

    id: int
    user_id: str
    weapon_id: int
    weapon_name: str
    weapon_image: str | None
    image_url: str | None
    title: str
    description: str | None
    build_code: str
    price: int
    stats: dict[str, int]
    tags: tuple[str, ...]
    status: str
    upvotes: int
    downvotes: int
    created_at: datetime
    author_username: str | None = None
    author_is_streamer: bool = False
    canonical_weapon_name: str | None = None
    canonical_weapon_image: str | None = None

    @classmethod
    def from_orm(
        cls,
        build: Build,
        author: Profile | None = None,
        weapon: Weapon | None = None,
    ) -> BuildRow:
        """Copy the fields of ORM instances into a detached row."""
        return cls(
            id=build.id,
            user_id=build.user_id,
            weapon_id=build.weapon_id,
            weapon_name=build.weapon_name,
            weapon_image=build.weapon_image,
            image_url=build.image_url,
            title=build.title,
            description=build.description,
            build_code=build.build_code,
            price=build.price,
            stats={name: getattr(build, name) or 0 for name in STAT_FIELDS},
            tags=tuple(build.tags or ()),
            status=build.status,
            upvotes=build.upvotes or 0,
            downvotes=build.downvotes or 0,
            created_at=build.created_at,
            author_username=author.username if author is not None else None,
            author_is_streamer=bool(author.is_streamer) if author is not None else False,
            canonical_weapon_name=weapon.name if weapon is not None else None,
            canonical_weapon_image=weapon.image_url if weapon is not None else None,
        )


@dataclass(frozen=True)
class ViewerInteractions:
    """The viewer's own votes and bookmarks among one page of builds."""

    votes: dict[int, str] = field(default_factory=dict)
    bookmarks: frozenset[int] = frozenset()


def load_interactions(db: Session, viewer: Viewer, build_ids: Iterable[int]) -> ViewerInteractions:
    """Batch-fetch the viewer's votes and bookmarks for ``build_ids``.

    Anonymous viewers and empty pages skip the lookup entirely.
    """
    ids = sorted(set(build_ids))
    if viewer.user_id is None or not ids:
        return ViewerInteractions()

    votes = db.execute(
        select(BuildVote.build_id, BuildVote.vote_type).where(
            BuildVote.user_id == viewer.user_id,
            BuildVote.build_id.in_(ids),
        )
    ).all()
    bookmarks = db.scalars(
        select(Bookmark.build_id).where(
            Bookmark.user_id == viewer.user_id,
            Bookmark.build_id.in_(ids),
        )
    ).all()
    return ViewerInteractions(
        votes={build_id: vote_type for build_id, vote_type in votes},
        bookmarks=frozenset(bookmarks),
    )


def display_tags(stored: Iterable[str], author_is_streamer: bool) -> list[str]:
    """Return stored tags plus the derived streamer tag when it applies."""
    tags = list(stored)
    if author_is_streamer and STREAMER_BUILD_TAG not in tags:
        tags.append(STREAMER_BUILD_TAG)
    return tags


def project(
    row: BuildRow,
    viewer: Viewer,
    interactions: ViewerInteractions | None = None,
) -> ProjectedBuild:
    """Build the externally visible, viewer-annotated shape of ``row``."""
    interactions = interactions or ViewerInteractions()
    weapon_name = row.canonical_weapon_name or row.weapon_name
    return ProjectedBuild(
        id=row.id,
        title=row.title or weapon_name,
        weapon_id=row.weapon_id,
        weapon_name=weapon_name,
        weapon_image=row.canonical_weapon_image or row.weapon_image or row.image_url,
        image_url=row.image_url,
        description=row.description,
        price=row.price,
        build_code=row.build_code,
        stats=BuildStats(**row.stats),
        tags=display_tags(row.tags, row.author_is_streamer),
        upvotes=row.upvotes,
        downvotes=row.downvotes,
        author=row.author_username or UNKNOWN_AUTHOR,
        author_id=row.user_id,
        status=row.status,
        created_at=row.created_at,
        user_vote=interactions.votes.get(row.id) if viewer.is_authenticated else None,
        is_bookmarked=viewer.is_authenticated and row.id in interactions.bookmarks,
        can_delete=viewer.can_delete(row.user_id),
        can_edit=viewer.can_edit,
    )


def project_page(
    db: Session,
    rows: list[tuple[Build, Profile | None, Weapon | None]],
    viewer: Viewer,
) -> list[ProjectedBuild]:
    """Project a page of joined rows with one batched interaction lookup."""
    build_rows = [BuildRow.from_orm(build, author, weapon) for build, author, weapon in rows]
    interactions = load_interactions(db, viewer, (row.id for row in build_rows))
    return [project(row, viewer, interactions) for row in build_rows]
