"""Weapon catalogue endpoint."""

from fastapi import APIRouter

from loadout_hub.api.v1.dependencies import SessionDep, raise_for_result
from loadout_hub.schemas.weapon import WeaponOut
from loadout_hub.services.weapons import list_weapons as list_weapon_catalogue

router = APIRouter(prefix="/weapons", tags=["weapons"])


@router.get("/", response_model=list[WeaponOut])
async def list_weapons(db: SessionDep) -> list[WeaponOut]:
    """List every weapon with its filter slug, ordered by name."""
    return raise_for_result(list_weapon_catalogue(db))
