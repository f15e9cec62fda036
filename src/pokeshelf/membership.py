"""Per-user library and favorites membership, held in memory.

Mutations are confirm-then-apply: the local sets change only after the
backend accepted the write. A failed write is logged, the method returns
``False`` and the cache is left as it was.

Removal is asymmetric on purpose: removing from the library deletes the row
(and with it the favorite flag), while removing from favorites only clears
the flag and leaves the entry in the library.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from pokeshelf.backend import eq
from pokeshelf.errors import ErrorCode, PokeShelfError
from pokeshelf.models.membership import MembershipRecord

if TYPE_CHECKING:
    from pokeshelf.backend import BackendClient
    from pokeshelf.models.catalog import CatalogEntry

log = structlog.get_logger()

MEMBERSHIP_TABLE = "user_pokemon"


class MembershipCache:
    def __init__(self, backend: BackendClient, user_id: str) -> None:
        self._backend = backend
        self._user_id = user_id
        # entry id -> snapshot, in the order entries joined the library
        self._library: dict[int, dict[str, Any]] = {}
        self._favorites: set[int] = set()
        self.loading = False

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def library_ids(self) -> frozenset[int]:
        return frozenset(self._library)

    @property
    def favorite_ids(self) -> frozenset[int]:
        return frozenset(self._favorites)

    @property
    def library(self) -> list[dict[str, Any]]:
        return list(self._library.values())

    @property
    def favorites(self) -> list[dict[str, Any]]:
        return [data for entry_id, data in self._library.items() if entry_id in self._favorites]

    def is_in_library(self, entry_id: int) -> bool:
        return entry_id in self._library

    def is_in_favorites(self, entry_id: int) -> bool:
        return entry_id in self._favorites

    def clear(self) -> None:
        self._library.clear()
        self._favorites.clear()

    def _filters(self, entry_id: int) -> dict[str, str]:
        return {"user_id": eq(self._user_id), "pokemon_id": eq(entry_id)}

    def _new_row(self, entry: CatalogEntry, *, favorite: bool) -> dict[str, Any]:
        record = MembershipRecord(
            user_id=self._user_id,
            pokemon_id=entry.id,
            pokemon_name=entry.name,
            pokemon_data=entry.model_dump(mode="json"),
            is_favorite=favorite,
        )
        return record.model_dump(
            mode="json", exclude={"id", "added_at", "updated_at"}
        )

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    async def load(self) -> bool:
        """Replace local state with the user's rows from the backend."""
        self.loading = True
        try:
            rows = await self._backend.select(
                MEMBERSHIP_TABLE, filters={"user_id": eq(self._user_id)}
            )
            records = [MembershipRecord.model_validate(row) for row in rows]
        except (PokeShelfError, ValidationError):
            log.warning("membership_load_failed", user_id=self._user_id, exc_info=True)
            return False
        finally:
            self.loading = False

        library: dict[int, dict[str, Any]] = {}
        favorites: set[int] = set()
        for record in records:
            library[record.pokemon_id] = record.pokemon_data
            if record.is_favorite:
                favorites.add(record.pokemon_id)
        self._library = library
        self._favorites = favorites
        log.info(
            "membership_loaded",
            user_id=self._user_id,
            library=len(library),
            favorites=len(favorites),
        )
        return True

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    async def add_to_library(self, entry: CatalogEntry) -> bool:
        if entry.id in self._library:
            return True
        try:
            await self._backend.insert(MEMBERSHIP_TABLE, self._new_row(entry, favorite=False))
        except PokeShelfError as exc:
            if exc.code != ErrorCode.DUPLICATE_ENTRY:
                log.warning("library_add_failed", entry_id=entry.id, exc_info=True)
                return False
            # Row already exists remotely; the local replica was stale
            log.debug("library_add_reconciled", entry_id=entry.id)
        self._library[entry.id] = entry.model_dump(mode="json")
        log.info("library_added", entry_id=entry.id)
        return True

    async def remove_from_library(self, entry_id: int) -> bool:
        try:
            await self._backend.delete(MEMBERSHIP_TABLE, filters=self._filters(entry_id))
        except PokeShelfError:
            log.warning("library_remove_failed", entry_id=entry_id, exc_info=True)
            return False
        self._library.pop(entry_id, None)
        self._favorites.discard(entry_id)
        log.info("library_removed", entry_id=entry_id)
        return True

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def add_to_favorites(self, entry: CatalogEntry) -> bool:
        """Flag an entry as favorite, creating its library row when missing."""
        try:
            existing = await self._backend.select_one(
                MEMBERSHIP_TABLE, columns="id", filters=self._filters(entry.id)
            )
            if existing:
                await self._backend.update(
                    MEMBERSHIP_TABLE,
                    {"is_favorite": True, "updated_at": datetime.now(UTC).isoformat()},
                    filters={"id": eq(existing["id"])},
                )
            else:
                await self._backend.insert(
                    MEMBERSHIP_TABLE, self._new_row(entry, favorite=True)
                )
        except PokeShelfError:
            log.warning("favorite_add_failed", entry_id=entry.id, exc_info=True)
            return False
        self._library.setdefault(entry.id, entry.model_dump(mode="json"))
        self._favorites.add(entry.id)
        log.info("favorite_added", entry_id=entry.id, created=not existing)
        return True

    async def remove_from_favorites(self, entry_id: int) -> bool:
        try:
            await self._backend.update(
                MEMBERSHIP_TABLE,
                {"is_favorite": False, "updated_at": datetime.now(UTC).isoformat()},
                filters=self._filters(entry_id),
            )
        except PokeShelfError:
            log.warning("favorite_remove_failed", entry_id=entry_id, exc_info=True)
            return False
        self._favorites.discard(entry_id)
        log.info("favorite_removed", entry_id=entry_id)
        return True
