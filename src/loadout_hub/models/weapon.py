"""Reference data for weapons builds are made for."""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from loadout_hub.db.session import Base


class Weapon(Base):
    """Read-only weapon catalogue entry, seeded out of band."""

    __tablename__ = "weapon"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    # Either a display label ("Assault Rifle") or a slug ("assault-rifle");
    # seed data has historically used both.
    category: Mapped[str] = mapped_column(String(60), nullable=False, index=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
