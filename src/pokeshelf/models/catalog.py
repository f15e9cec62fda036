from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, PositiveInt, field_validator

ARTWORK_URL = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/"
    "official-artwork/{id}.png"
)

# Columns written on insert/upsert; timestamps are owned by the backend.
_WRITABLE_COLUMNS = (
    "id",
    "name",
    "height",
    "weight",
    "types",
    "abilities",
    "stats",
    "sprites",
    "species_url",
    "is_active",
    "is_hidden",
)


class CatalogEntry(BaseModel):
    """Single row of the curated catalog (``external_pokemon``)."""

    id: PositiveInt
    name: str
    height: int | None = None
    weight: int | None = None
    # Detail payload, passed through as stored
    types: list[Any] = []
    abilities: list[Any] = []
    stats: list[Any] = []
    sprites: dict[str, Any] = {}
    species_url: str | None = None
    is_active: bool = True
    is_hidden: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip().lower()
        if not v:
            raise ValueError("name must not be empty")
        return v

    @property
    def image_url(self) -> str:
        artwork = (self.sprites.get("other") or {}).get("official-artwork") or {}
        return (
            artwork.get("front_default")
            or self.sprites.get("front_default")
            or ARTWORK_URL.format(id=self.id)
        )

    @property
    def searchable(self) -> bool:
        return self.is_active and not self.is_hidden

    def to_row(self) -> dict[str, Any]:
        """Column mapping for insert/upsert requests."""
        return self.model_dump(mode="json", include=set(_WRITABLE_COLUMNS))

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> CatalogEntry:
        """Build an entry from a PokeAPI ``/pokemon/{id}`` document."""
        species = payload.get("species") or {}
        return cls(
            id=payload["id"],
            name=payload["name"],
            height=payload.get("height"),
            weight=payload.get("weight"),
            types=payload.get("types") or [],
            abilities=payload.get("abilities") or [],
            stats=payload.get("stats") or [],
            sprites=payload.get("sprites") or {},
            species_url=species.get("url"),
        )


class CatalogStats(BaseModel):
    """Row counts shown on the admin overview."""

    users: int = 0
    library_rows: int = 0
    favorite_rows: int = 0
    active_entries: int = 0
    hidden_entries: int = 0
    notification_recipients: int = 0
