"""Integration test fixtures.

Provides a fully wired AppState whose HTTP traffic lands on a small in-memory
stand-in for the catalog, membership and profiles tables. Catalog rows come
from tests/conftest.py (sample_rows, catalog_api).
"""

from __future__ import annotations

import json
from itertools import count
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from pokeshelf.state import open_app_state
from tests.conftest import MEMBERSHIP_PATH

if TYPE_CHECKING:
    import respx

    from pokeshelf.config import Settings
    from pokeshelf.models.catalog import CatalogEntry
    from pokeshelf.state import AppState


class MembershipStore:
    """Just enough of PostgREST's ``user_pokemon`` semantics for the cache."""

    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        self._ids = count(1)

    def _matches(self, row: dict[str, Any], params: httpx.QueryParams) -> bool:
        for column in ("id", "user_id", "pokemon_id"):
            if column in params and str(row[column]) != params[column].removeprefix("eq."):
                return False
        return True

    def handle(self, request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if request.method == "GET":
            rows = [row for row in self.rows if self._matches(row, params)]
            if "limit" in params:
                rows = rows[: int(params["limit"])]
            return httpx.Response(200, json=rows)
        if request.method == "POST":
            row = json.loads(request.content)
            if any(
                r["user_id"] == row["user_id"] and r["pokemon_id"] == row["pokemon_id"]
                for r in self.rows
            ):
                return httpx.Response(409, json={"code": "23505", "message": "duplicate key"})
            row["id"] = f"row-{next(self._ids)}"
            self.rows.append(row)
            return httpx.Response(201, json=[row])
        if request.method == "PATCH":
            changes = json.loads(request.content)
            updated = []
            for row in self.rows:
                if self._matches(row, params):
                    row.update(changes)
                    updated.append(row)
            return httpx.Response(200, json=updated)
        if request.method == "DELETE":
            self.rows = [row for row in self.rows if not self._matches(row, params)]
            return httpx.Response(204)
        return httpx.Response(405)


@pytest.fixture()
def membership_store(router: respx.MockRouter) -> MembershipStore:
    store = MembershipStore()
    router.route(path=MEMBERSHIP_PATH).mock(side_effect=store.handle)
    return store


@pytest.fixture()
def rendered() -> list[list[CatalogEntry]]:
    return []


@pytest.fixture()
async def app_state(
    settings: Settings,
    router: respx.MockRouter,
    catalog_api: respx.Route,
    membership_store: MembershipStore,
    rendered: list[list[CatalogEntry]],
) -> AppState:
    """AppState with a warm name index, ready for searches and sign-in."""
    async with open_app_state(settings, on_results=rendered.append) as state:
        await state.search.refresh_index()
        yield state
