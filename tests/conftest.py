"""Shared fixtures: settings pointed at a mocked backend, sample catalog rows."""

from __future__ import annotations

from typing import Any

import httpx
import pytest
import respx

from pokeshelf.backend import BackendClient, build_http_client
from pokeshelf.config import Settings

BASE_URL = "https://backend.test"
CATALOG_PATH = "/rest/v1/external_pokemon"
MEMBERSHIP_PATH = "/rest/v1/user_pokemon"
PROFILES_PATH = "/rest/v1/profiles"


def make_row(entry_id: int, name: str, **overrides: Any) -> dict[str, Any]:
    row: dict[str, Any] = {
        "id": entry_id,
        "name": name,
        "height": 4,
        "weight": 60,
        "types": [{"type": {"name": "electric"}}],
        "abilities": [],
        "stats": [{"base_stat": 35, "stat": {"name": "hp"}}],
        "sprites": {"front_default": f"https://img.test/{entry_id}.png"},
        "species_url": None,
        "is_active": True,
        "is_hidden": False,
    }
    row.update(overrides)
    return row


def parse_in_filter(value: str) -> list[str]:
    """``in.("a","b")`` -> ``["a", "b"]``"""
    inner = value.removeprefix("in.(").removesuffix(")")
    return [item.strip('"') for item in inner.split(",") if item]


@pytest.fixture()
def sample_rows() -> list[dict[str, Any]]:
    return [
        make_row(1, "bulbasaur"),
        make_row(25, "pikachu"),
        make_row(26, "raichu"),
        make_row(150, "mewtwo", is_hidden=True),
        make_row(151, "mew", is_active=False),
    ]


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        backend={"url": BASE_URL, "anon_key": "anon-key"},
        search={"debounce_ms": 60, "blur_grace_ms": 30},
    )


@pytest.fixture()
def router():
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture()
async def backend(settings: Settings):
    async with build_http_client(settings.backend) as client:
        yield BackendClient(client, settings.backend)


@pytest.fixture()
def catalog_api(router: respx.MockRouter, sample_rows: list[dict[str, Any]]) -> respx.Route:
    """A catalog endpoint that honours the visibility filters and ``name=in.(...)``."""

    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        rows = [
            row
            for row in sample_rows
            if (params.get("is_active") != "eq.true" or row["is_active"])
            and (params.get("is_hidden") != "eq.false" or not row["is_hidden"])
        ]
        if "name" in params:
            wanted = set(parse_in_filter(params["name"]))
            rows = [row for row in rows if row["name"] in wanted]
        if params.get("select") == "name":
            return httpx.Response(200, json=[{"name": row["name"]} for row in rows])
        return httpx.Response(200, json=rows)

    return router.get(CATALOG_PATH).mock(side_effect=handler)
