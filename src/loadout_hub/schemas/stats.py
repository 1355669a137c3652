"""Landing page aggregate counters."""

from pydantic import BaseModel


class SiteStats(BaseModel):
    """Totals displayed on the landing page; zeroed when unavailable."""

    total_builds: int = 0
    active_users: int = 0
    weapons: int = 0
    total_votes: int = 0
