from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel


class MembershipRecord(BaseModel):
    """One ``user_pokemon`` row: presence means "in library"."""

    id: str | None = None
    user_id: str
    pokemon_id: int
    pokemon_name: str
    pokemon_data: dict[str, Any] = {}  # Snapshot of the catalog entry at add time
    is_favorite: bool = False
    added_at: datetime | None = None
    updated_at: datetime | None = None
