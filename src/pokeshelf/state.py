"""Process-wide wiring: one AppState per running client.

Components receive their collaborators explicitly; nothing below reaches for
a module-level instance. The membership cache belongs to the signed-in user
and is discarded and rebuilt whenever that user changes.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from pokeshelf.backend import BackendClient, build_http_client
from pokeshelf.catalog import CatalogRepository
from pokeshelf.functions import FunctionsClient
from pokeshelf.membership import MembershipCache
from pokeshelf.name_index import NameIndex
from pokeshelf.profiles import ProfileService
from pokeshelf.search import SearchController

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    import httpx

    from pokeshelf.config import Settings
    from pokeshelf.models.catalog import CatalogEntry
    from pokeshelf.models.session import UserSession

log = structlog.get_logger()


@dataclass
class AppState:
    settings: Settings
    http_client: httpx.AsyncClient
    backend: BackendClient
    catalog: CatalogRepository
    search: SearchController
    profiles: ProfileService
    functions: FunctionsClient
    session: UserSession | None = None
    membership: MembershipCache | None = None

    @classmethod
    def build(
        cls,
        settings: Settings,
        http_client: httpx.AsyncClient,
        on_results: Callable[[list[CatalogEntry]], None] | None = None,
    ) -> AppState:
        backend = BackendClient(http_client, settings.backend)
        catalog = CatalogRepository(backend, search_limit=settings.search.search_limit)
        return cls(
            settings=settings,
            http_client=http_client,
            backend=backend,
            catalog=catalog,
            search=SearchController(NameIndex(catalog), catalog, settings.search, on_results),
            profiles=ProfileService(backend),
            functions=FunctionsClient(backend, catalog, settings.functions),
        )

    async def sign_in(self, session: UserSession) -> MembershipCache:
        """Adopt ``session`` and load a fresh membership cache for it."""
        if self.membership is not None:
            self.membership.clear()
        self.session = session
        self.backend.set_access_token(session.access_token)
        self.membership = MembershipCache(self.backend, session.user_id)
        await self.membership.load()
        log.info("session_started", user_id=session.user_id)
        return self.membership

    def sign_out(self) -> None:
        if self.membership is not None:
            self.membership.clear()
        if self.session is not None:
            log.info("session_ended", user_id=self.session.user_id)
        self.session = None
        self.membership = None
        self.backend.set_access_token(None)


@asynccontextmanager
async def open_app_state(
    settings: Settings,
    on_results: Callable[[list[CatalogEntry]], None] | None = None,
) -> AsyncIterator[AppState]:
    """Own the HTTP client for the lifetime of the state."""
    async with build_http_client(settings.backend) as client:
        state = AppState.build(settings, client, on_results)
        try:
            yield state
        finally:
            state.sign_out()
