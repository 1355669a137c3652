"""Weapon reference schemas."""

from pydantic import BaseModel, ConfigDict


class WeaponOut(BaseModel):
    """Weapon catalogue entry with its filter slug."""

    id: int
    name: str
    category: str
    image_url: str | None = None
    slug: str

    model_config = ConfigDict(from_attributes=True)
