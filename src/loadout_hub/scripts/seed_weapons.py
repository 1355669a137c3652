# src/loadout_hub/scripts/seed_weapons.py
"""
Load the weapon catalogue from a JSON file.

The file holds a list of objects with ``name``, ``category`` and optional
``image_url``. Existing weapons are matched by name (ignoring case) and
updated in place, so the script can be re-run after editing the file.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from loadout_hub.core.logging import configure_logging
from loadout_hub.db.session import SessionLocal
from loadout_hub.models import Weapon

logger = logging.getLogger(__name__)


def load_entries(path: Path) -> list[dict[str, Any]]:
    """Read and minimally validate the weapon list."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path} must contain a JSON list of weapons")
    entries = []
    for index, item in enumerate(data):
        if not isinstance(item, dict) or not item.get("name") or not item.get("category"):
            raise ValueError(f"Entry {index} needs 'name' and 'category'")
        entries.append(item)
    return entries


def seed_weapons(db: Session, entries: Iterable[Mapping[str, Any]]) -> tuple[int, int]:
    """Insert or update weapons.

    Args:
        db: Database session
        entries: Weapon records with name, category and optional image_url

    Returns:
        ``(created, updated)`` counts
    """
    created = updated = 0
    for entry in entries:
        name = str(entry["name"]).strip()
        weapon = db.query(Weapon).filter(func.lower(Weapon.name) == name.lower()).first()
        if weapon is None:
            db.add(Weapon(name=name, category=entry["category"], image_url=entry.get("image_url")))
            created += 1
        else:
            weapon.category = entry["category"]
            weapon.image_url = entry.get("image_url", weapon.image_url)
            updated += 1
    db.commit()
    return created, updated


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed the weapon catalogue from a JSON file.")
    parser.add_argument("path", type=Path, help="JSON file with the weapon list")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        entries = load_entries(args.path)
    except (OSError, ValueError) as exc:
        logger.error("Could not read %s: %s", args.path, exc)
        return 1

    db = SessionLocal()
    try:
        created, updated = seed_weapons(db, entries)
    finally:
        db.close()
    logger.info("Seeded weapons: %s created, %s updated", created, updated)
    return 0


if __name__ == "__main__":
    sys.exit(main())
