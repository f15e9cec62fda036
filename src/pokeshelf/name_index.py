from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pokeshelf.errors import PokeShelfError

if TYPE_CHECKING:
    from pokeshelf.catalog import CatalogRepository

log = structlog.get_logger()


class NameIndex:
    """Source of the searchable names: active, non-hidden catalog entries.

    Every ``load()`` is a full read; nothing is cached between calls. The same
    list feeds both live results and type-ahead suggestions.
    """

    def __init__(self, catalog: CatalogRepository) -> None:
        self._catalog = catalog

    async def load(self) -> list[str]:
        """Return the current names, or an empty list if the read fails."""
        try:
            names = await self._catalog.list_searchable_names()
        except PokeShelfError:
            log.warning("name_index_load_failed", exc_info=True)
            return []
        log.debug("name_index_loaded", count=len(names))
        return names
