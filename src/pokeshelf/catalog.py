"""Catalog reads and admin curation over the ``external_pokemon`` table.

User-facing lookups (``search_by_name``, ``fetch_by_names``, ``get_by_id``,
``list_active_ids``) degrade to an empty result on backend failure and log
the error. ``list_active`` raises, so callers that need to tell "empty" from
"unavailable" can. Admin mutations verify the caller's role first and raise
``PokeShelfError`` before issuing any write.

Live search results are hydrated by exact name (``fetch_by_names``) with the
fuzzy candidates in rank order, not by intersecting them with a substring
match on the typed query: a substring filter would drop every typo match
("pikchu" never contains "pikachu"). ``search_by_name`` keeps the capped
substring lookup for callers that want it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pokeshelf.backend import eq, ilike, in_, not_is
from pokeshelf.errors import ErrorCode, PokeShelfError
from pokeshelf.membership import MEMBERSHIP_TABLE
from pokeshelf.models.catalog import CatalogEntry, CatalogStats
from pokeshelf.profiles import PROFILES_TABLE

if TYPE_CHECKING:
    from collections.abc import Sequence

    from pokeshelf.backend import BackendClient
    from pokeshelf.models.session import UserSession

log = structlog.get_logger()

CATALOG_TABLE = "external_pokemon"

_SEARCHABLE = {"is_active": eq(True), "is_hidden": eq(False)}


class CatalogRepository:
    def __init__(self, backend: BackendClient, *, search_limit: int = 20) -> None:
        self._backend = backend
        self._search_limit = search_limit

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def list_active(self, *, include_hidden: bool = False) -> list[CatalogEntry]:
        """All active entries ordered by id. Raises on backend failure."""
        filters = {"is_active": eq(True)}
        if not include_hidden:
            filters["is_hidden"] = eq(False)
        rows = await self._backend.select(CATALOG_TABLE, filters=filters, order="id")
        return [CatalogEntry.model_validate(row) for row in rows]

    async def list_searchable_names(self) -> list[str]:
        """Names of active, visible entries ordered by id. Raises on backend failure."""
        rows = await self._backend.select(
            CATALOG_TABLE, columns="name", filters=_SEARCHABLE, order="id"
        )
        return [row["name"] for row in rows]

    async def list_active_ids(self) -> list[int]:
        try:
            rows = await self._backend.select(
                CATALOG_TABLE, columns="id", filters={"is_active": eq(True)}
            )
        except PokeShelfError:
            log.warning("catalog_ids_failed", exc_info=True)
            return []
        return [row["id"] for row in rows]

    async def get_by_id(self, entry_id: int) -> CatalogEntry | None:
        try:
            row = await self._backend.select_one(
                CATALOG_TABLE, filters={"id": eq(entry_id), "is_active": eq(True)}
            )
        except PokeShelfError:
            log.warning("catalog_get_failed", entry_id=entry_id, exc_info=True)
            return None
        return CatalogEntry.model_validate(row) if row else None

    async def is_in_catalog(self, entry_id: int) -> bool:
        return await self.get_by_id(entry_id) is not None

    async def search_by_name(self, query: str) -> list[CatalogEntry]:
        """Case-insensitive substring lookup, capped at ``search_limit`` rows."""
        query = query.strip()
        if not query:
            return []
        try:
            rows = await self._backend.select(
                CATALOG_TABLE,
                filters={**_SEARCHABLE, "name": ilike(f"*{query}*")},
                order="id",
                limit=self._search_limit,
            )
        except PokeShelfError:
            log.warning("catalog_search_failed", query=query, exc_info=True)
            return []
        return [CatalogEntry.model_validate(row) for row in rows]

    async def fetch_by_names(self, names: Sequence[str]) -> list[CatalogEntry]:
        """Full records for the given names, in the order the names were given."""
        if not names:
            return []
        try:
            rows = await self._backend.select(
                CATALOG_TABLE, filters={**_SEARCHABLE, "name": in_(names)}
            )
        except PokeShelfError:
            log.warning("catalog_hydrate_failed", candidates=len(names), exc_info=True)
            return []
        rank = {name: position for position, name in enumerate(names)}
        entries = [CatalogEntry.model_validate(row) for row in rows]
        entries = [entry for entry in entries if entry.name in rank]
        entries.sort(key=lambda entry: rank[entry.name])
        return entries

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    async def is_admin(self, session: UserSession | None) -> bool:
        if session is None:
            return False
        try:
            row = await self._backend.select_one(
                PROFILES_TABLE, columns="role", filters={"id": eq(session.user_id)}
            )
        except PokeShelfError:
            log.warning("admin_check_failed", user_id=session.user_id, exc_info=True)
            return False
        is_admin = bool(row) and row.get("role") == "admin"
        log.debug("admin_check", user_id=session.user_id, is_admin=is_admin)
        return is_admin

    async def require_admin(self, session: UserSession | None) -> None:
        if session is None:
            raise PokeShelfError(
                code=ErrorCode.NOT_AUTHENTICATED,
                message="You must be signed in to perform this action",
                suggestion="Sign in with an administrator account.",
            )
        if not await self.is_admin(session):
            raise PokeShelfError(
                code=ErrorCode.PERMISSION_DENIED,
                message="You do not have administrator rights to perform this action",
                suggestion="Ask an administrator to grant your account the admin role.",
            )

    async def add_entry(self, session: UserSession | None, entry: CatalogEntry) -> CatalogEntry:
        await self.require_admin(session)
        row = entry.to_row()
        row["is_active"] = True
        try:
            created = await self._backend.insert(CATALOG_TABLE, row)
        except PokeShelfError as exc:
            if exc.code == ErrorCode.DUPLICATE_ENTRY:
                raise PokeShelfError(
                    code=ErrorCode.DUPLICATE_ENTRY,
                    message=f"Pokemon {entry.name} already exists in the catalog",
                ) from exc
            raise
        log.info("catalog_entry_added", entry_id=entry.id, name=entry.name)
        return CatalogEntry.model_validate(created[0]) if created else entry

    async def remove_entry(self, session: UserSession | None, entry_id: int) -> None:
        """Soft delete: the row stays, flagged inactive."""
        await self.require_admin(session)
        await self._backend.update(
            CATALOG_TABLE, {"is_active": False}, filters={"id": eq(entry_id)}
        )
        log.info("catalog_entry_removed", entry_id=entry_id)

    async def set_hidden(self, session: UserSession | None, entry_id: int, hidden: bool) -> None:
        await self.require_admin(session)
        await self._backend.update(
            CATALOG_TABLE, {"is_hidden": hidden}, filters={"id": eq(entry_id)}
        )
        log.info("catalog_visibility_changed", entry_id=entry_id, hidden=hidden)

    async def import_batch(
        self, session: UserSession | None, entries: Sequence[CatalogEntry]
    ) -> int:
        """Upsert entries by id, reactivating any that were soft-deleted."""
        await self.require_admin(session)
        if not entries:
            return 0
        rows = []
        for entry in entries:
            row = entry.to_row()
            row["is_active"] = True
            rows.append(row)
        await self._backend.upsert(CATALOG_TABLE, rows, on_conflict="id")
        log.info("catalog_batch_imported", count=len(rows))
        return len(rows)

    async def stats(self, session: UserSession | None) -> CatalogStats:
        await self.require_admin(session)
        return CatalogStats(
            users=await self._backend.count(PROFILES_TABLE),
            library_rows=await self._backend.count(MEMBERSHIP_TABLE),
            favorite_rows=await self._backend.count(
                MEMBERSHIP_TABLE, filters={"is_favorite": eq(True)}
            ),
            active_entries=await self._backend.count(
                CATALOG_TABLE, filters={"is_active": eq(True)}
            ),
            hidden_entries=await self._backend.count(
                CATALOG_TABLE, filters={"is_hidden": eq(True)}
            ),
            notification_recipients=await self._backend.count(
                PROFILES_TABLE,
                filters={"email_notifications": eq(True), "email": not_is(None)},
            ),
        )

