"""Search surface: debounced live results plus synchronous suggestions.

Keystrokes go through ``set_query``. Suggestions are recomputed on every call;
the live search only runs once input has been quiet for the debounce delay.
A fired search ranks names locally, then hydrates the candidates with one
backend read. Every executed search takes a generation number and its
response is dropped if a newer search (or a cleared query) superseded it.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

from pokeshelf.debounce import Debouncer
from pokeshelf.matcher import FuzzyMatcher, normalize_names

if TYPE_CHECKING:
    from collections.abc import Callable

    from pokeshelf.catalog import CatalogRepository
    from pokeshelf.config import SearchSettings
    from pokeshelf.models.catalog import CatalogEntry
    from pokeshelf.name_index import NameIndex

log = structlog.get_logger()


class SearchController:
    def __init__(
        self,
        name_index: NameIndex,
        catalog: CatalogRepository,
        settings: SearchSettings,
        on_results: Callable[[list[CatalogEntry]], None] | None = None,
    ) -> None:
        self._name_index = name_index
        self._catalog = catalog
        self._settings = settings
        self._on_results = on_results
        self._matcher = FuzzyMatcher(())
        self._debouncer = Debouncer(settings.debounce_ms / 1000, self._execute)
        self._generation = 0
        self._blur_timer: asyncio.TimerHandle | None = None

        self.query = ""
        self.results: list[CatalogEntry] = []
        self.loading = False
        self.suggestions: list[str] = []
        self.suggestions_visible = False

    @property
    def names(self) -> tuple[str, ...]:
        return self._matcher.names

    @property
    def generation(self) -> int:
        return self._generation

    # ------------------------------------------------------------------
    # Index
    # ------------------------------------------------------------------

    async def refresh_index(self) -> bool:
        """Reload names; rebuild the matcher only if they changed. Returns True on rebuild.

        A rebuild recomputes suggestions and schedules the live search again
        for a non-blank query, so results typed before the names arrived fill in.
        """
        names = normalize_names(await self._name_index.load())
        if names == self._matcher.names:
            return False
        self._matcher = FuzzyMatcher(names)
        log.info("search_index_rebuilt", names=len(self._matcher))
        self._update_suggestions()
        if self.query.strip():
            self._debouncer.trigger(self.query)
        return True

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def set_query(self, text: str) -> None:
        self.query = text
        self._update_suggestions()
        if not text.strip():
            self._debouncer.cancel()
            self._generation += 1
            self.loading = False
            self._apply([])
            return
        self._debouncer.trigger(text)

    def suggest(self, text: str) -> list[str]:
        return self._matcher.search(text, self._settings.suggestions)

    def focus(self) -> None:
        self._cancel_blur()
        if self.suggestions:
            self.suggestions_visible = True

    def blur(self) -> None:
        """Hide suggestions after a grace delay so a click on one still lands."""
        self._cancel_blur()
        loop = asyncio.get_running_loop()
        self._blur_timer = loop.call_later(
            self._settings.blur_grace_ms / 1000, self._hide_suggestions
        )

    def select_suggestion(self, name: str) -> None:
        self._cancel_blur()
        self.set_query(name)
        self.suggestions_visible = False

    async def wait_idle(self) -> None:
        await self._debouncer.wait_idle()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _update_suggestions(self) -> None:
        if not self.query.strip() or not self._matcher.names:
            self.suggestions = []
        else:
            self.suggestions = self.suggest(self.query)
        self.suggestions_visible = bool(self.suggestions)

    def _hide_suggestions(self) -> None:
        self._blur_timer = None
        self.suggestions_visible = False

    def _cancel_blur(self) -> None:
        if self._blur_timer is not None:
            self._blur_timer.cancel()
            self._blur_timer = None

    async def _execute(self, query: str) -> None:
        self._generation += 1
        generation = self._generation
        self.loading = True
        log.debug("search_started", query=query, generation=generation)

        try:
            candidates = self._matcher.search(query, self._settings.results)
            entries = await self._catalog.fetch_by_names(candidates) if candidates else []
        finally:
            if generation == self._generation:
                self.loading = False

        if generation != self._generation:
            log.debug(
                "search_result_discarded",
                query=query,
                generation=generation,
                latest=self._generation,
            )
            return
        log.info("search_completed", query=query, candidates=len(candidates), results=len(entries))
        self._apply(entries)

    def _apply(self, entries: list[CatalogEntry]) -> None:
        self.results = entries
        if self._on_results is not None:
            self._on_results(entries)
