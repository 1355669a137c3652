"""Weapon reference data helpers."""

from __future__ import annotations

import re

from sqlalchemy.orm import Session

from loadout_hub.models import Weapon
from loadout_hub.schemas.weapon import WeaponOut
from loadout_hub.services.errors import service_action

_WHITESPACE = re.compile(r"\s+")


def weapon_slug(name: str) -> str:
    """Return the URL slug used to filter by a weapon, e.g. ``"AK 74N" -> "ak-74n"``."""
    return _WHITESPACE.sub("-", name.lower())


def to_weapon_out(weapon: Weapon) -> WeaponOut:
    """Convert a Weapon ORM instance to an API schema."""
    return WeaponOut(
        id=weapon.id,
        name=weapon.name,
        category=weapon.category,
        image_url=weapon.image_url,
        slug=weapon_slug(weapon.name),
    )


@service_action("list weapons")
def list_weapons(db: Session) -> list[WeaponOut]:
    """Return the weapon catalogue ordered by name."""
    weapons = db.query(Weapon).order_by(Weapon.name.asc()).all()
    return [to_weapon_out(weapon) for weapon in weapons]
