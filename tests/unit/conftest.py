"""Unit-specific fixtures (sessions and role lookups on the mocked backend)."""

from __future__ import annotations

import httpx
import pytest
import respx

from pokeshelf.models.session import UserSession
from tests.conftest import PROFILES_PATH


@pytest.fixture()
def admin_session() -> UserSession:
    return UserSession(user_id="admin-1", email="admin@example.com", access_token="admin-jwt")


@pytest.fixture()
def user_session() -> UserSession:
    return UserSession(user_id="user-1", email="ash@example.com", access_token="user-jwt")


@pytest.fixture()
def roles(router: respx.MockRouter) -> respx.Route:
    """Profiles lookup answering ``admin`` for admin-1 and ``user`` for everyone else."""

    def handler(request: httpx.Request) -> httpx.Response:
        user_id = request.url.params.get("id", "").removeprefix("eq.")
        role = "admin" if user_id == "admin-1" else "user"
        return httpx.Response(200, json=[{"role": role}])

    return router.get(PROFILES_PATH).mock(side_effect=handler)
