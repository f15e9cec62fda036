"""Unit tests for pokeshelf.functions (HTTP mocked with respx)."""

from __future__ import annotations

import json

import httpx
import pytest
import respx

from pokeshelf.backend import BackendClient
from pokeshelf.catalog import CatalogRepository
from pokeshelf.config import Settings
from pokeshelf.errors import ErrorCode, PokeShelfError
from pokeshelf.functions import FunctionsClient
from pokeshelf.models.catalog import CatalogEntry
from pokeshelf.models.session import UserSession

IMPORT_PATH = "/functions/v1/import-pokemon"
NOTIFY_PATH = "/functions/v1/send-pokemon-notification"


@pytest.fixture()
def functions(backend: BackendClient, settings: Settings) -> FunctionsClient:
    return FunctionsClient(backend, CatalogRepository(backend), settings.functions)


class TestImportRange:
    async def test_successful_import(
        self,
        router: respx.MockRouter,
        functions: FunctionsClient,
        roles: respx.Route,
        admin_session: UserSession,
    ) -> None:
        route = router.post(IMPORT_PATH).mock(
            return_value=httpx.Response(
                200, json={"success": True, "imported": 3, "message": "Imported 3 Pokemon"}
            )
        )

        result = await functions.import_range(admin_session, 1, 3)

        assert result.imported == 3
        assert json.loads(route.calls.last.request.content) == {"start": 1, "end": 3}

    @pytest.mark.parametrize(("start", "end"), [(0, 10), (10, 5), (-3, -1)])
    async def test_invalid_range_rejected_before_any_request(
        self,
        router: respx.MockRouter,
        functions: FunctionsClient,
        roles: respx.Route,
        admin_session: UserSession,
        start: int,
        end: int,
    ) -> None:
        route = router.post(IMPORT_PATH)

        with pytest.raises(PokeShelfError) as exc_info:
            await functions.import_range(admin_session, start, end)

        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert not route.called
        assert not roles.called

    async def test_non_admin_is_rejected(
        self,
        router: respx.MockRouter,
        functions: FunctionsClient,
        roles: respx.Route,
        user_session: UserSession,
    ) -> None:
        route = router.post(IMPORT_PATH)

        with pytest.raises(PokeShelfError) as exc_info:
            await functions.import_range(user_session, 1, 10)

        assert exc_info.value.code == ErrorCode.PERMISSION_DENIED
        assert not route.called

    async def test_reported_failure_raises(
        self,
        router: respx.MockRouter,
        functions: FunctionsClient,
        roles: respx.Route,
        admin_session: UserSession,
    ) -> None:
        router.post(IMPORT_PATH).mock(
            return_value=httpx.Response(200, json={"success": False, "error": "rate limited"})
        )

        with pytest.raises(PokeShelfError) as exc_info:
            await functions.import_range(admin_session, 1, 10)

        assert exc_info.value.code == ErrorCode.FUNCTION_FAILED
        assert "rate limited" in exc_info.value.message


class TestNotify:
    async def test_counts_are_reported(
        self,
        router: respx.MockRouter,
        functions: FunctionsClient,
        roles: respx.Route,
        admin_session: UserSession,
    ) -> None:
        route = router.post(NOTIFY_PATH).mock(
            return_value=httpx.Response(
                200,
                json={
                    "success": True,
                    "message": "Notifications sent",
                    "details": {
                        "successCount": 2,
                        "failureCount": 1,
                        "results": [
                            {"email": "a@example.com", "success": True},
                            {"email": "b@example.com", "success": True},
                            {"email": "c@example.com", "success": False, "error": "bounced"},
                        ],
                    },
                },
            )
        )

        result = await functions.notify_new_entry(
            admin_session, CatalogEntry(id=25, name="pikachu")
        )

        assert (result.sent, result.failed) == (2, 1)
        assert result.details is not None and result.details.results[2].error == "bounced"
        assert json.loads(route.calls.last.request.content)["pokemon"]["name"] == "pikachu"

    async def test_transport_failure_is_function_failed(
        self,
        router: respx.MockRouter,
        functions: FunctionsClient,
        roles: respx.Route,
        admin_session: UserSession,
    ) -> None:
        router.post(NOTIFY_PATH).mock(side_effect=httpx.ConnectError("refused"))

        with pytest.raises(PokeShelfError) as exc_info:
            await functions.notify_new_entry(admin_session, CatalogEntry(id=25, name="pikachu"))

        assert exc_info.value.code == ErrorCode.FUNCTION_FAILED
        assert exc_info.value.recoverable is True
