"""Landing page aggregate counters with an in-process cache."""

from __future__ import annotations

import logging
import threading
import time

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from loadout_hub.core.settings import settings
from loadout_hub.models import Build, BuildVote, Profile, Weapon
from loadout_hub.schemas.stats import SiteStats

logger = logging.getLogger(__name__)


class StatsCache:
    """Holds the last computed :class:`SiteStats` for a fixed number of seconds."""

    def __init__(self, ttl_seconds: float) -> None:
        self.ttl_seconds = ttl_seconds
        self._value: SiteStats | None = None
        self._expires_at = 0.0
        self._lock = threading.Lock()

    def get(self) -> SiteStats | None:
        with self._lock:
            if self._value is not None and time.monotonic() < self._expires_at:
                return self._value
            return None

    def set(self, value: SiteStats) -> None:
        with self._lock:
            self._value = value
            self._expires_at = time.monotonic() + self.ttl_seconds

    def clear(self) -> None:
        with self._lock:
            self._value = None
            self._expires_at = 0.0


stats_cache = StatsCache(settings.stats_cache_seconds)


def _count(db: Session, column) -> int:  # type: ignore[no-untyped-def]
    return db.scalar(select(func.count(column))) or 0


def get_site_stats(db: Session, cache: StatsCache | None = None) -> SiteStats:
    """Return totals for builds, profiles, weapons and votes.

    The counters are decorative, so a store failure yields zeros instead of
    an error and is not cached.
    """
    cache = cache or stats_cache
    cached = cache.get()
    if cached is not None:
        return cached

    try:
        stats = SiteStats(
            total_builds=_count(db, Build.id),
            active_users=_count(db, Profile.id),
            weapons=_count(db, Weapon.id),
            total_votes=_count(db, BuildVote.build_id),
        )
    except SQLAlchemyError as exc:
        logger.error("Stats fetch failed: %s", exc, exc_info=True)
        db.rollback()
        return SiteStats()

    cache.set(stats)
    return stats
