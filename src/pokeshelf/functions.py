"""Callers for the two backend edge functions: batch import and new-entry email."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError

from pokeshelf.errors import ErrorCode, PokeShelfError
from pokeshelf.models.functions import ImportRequest, ImportResult, NotificationResult

if TYPE_CHECKING:
    from pokeshelf.backend import BackendClient
    from pokeshelf.catalog import CatalogRepository
    from pokeshelf.config import FunctionSettings
    from pokeshelf.models.catalog import CatalogEntry
    from pokeshelf.models.session import UserSession

log = structlog.get_logger()


class FunctionsClient:
    def __init__(
        self,
        backend: BackendClient,
        catalog: CatalogRepository,
        settings: FunctionSettings,
    ) -> None:
        self._backend = backend
        self._catalog = catalog
        self._settings = settings

    async def import_range(
        self, session: UserSession | None, start: int, end: int
    ) -> ImportResult:
        """Upsert catalog entries for ids ``start..end`` (inclusive) from upstream."""
        try:
            request = ImportRequest(start=start, end=end)
        except ValidationError as exc:
            raise PokeShelfError(
                code=ErrorCode.INVALID_INPUT,
                message=f"Invalid import range {start}-{end}: {exc.errors()[0]['msg']}",
            ) from exc
        await self._catalog.require_admin(session)

        log.info("import_requested", start=request.start, end=request.end)
        body = await self._backend.invoke(
            self._settings.import_name,
            request.model_dump(),
            timeout=self._settings.timeout_seconds,
        )
        result = ImportResult.model_validate(body)
        if not result.success:
            raise PokeShelfError(
                code=ErrorCode.FUNCTION_FAILED,
                message=f"Import failed: {body.get('error') or result.message}",
                recoverable=True,
            )
        log.info("import_completed", imported=result.imported)
        return result

    async def notify_new_entry(
        self, session: UserSession | None, entry: CatalogEntry
    ) -> NotificationResult:
        """Ask the backend to email every opted-in user about ``entry``."""
        await self._catalog.require_admin(session)

        body = await self._backend.invoke(
            self._settings.notify_name,
            {"pokemon": entry.model_dump(mode="json")},
            timeout=self._settings.timeout_seconds,
        )
        result = NotificationResult.model_validate(body)
        if not result.success:
            raise PokeShelfError(
                code=ErrorCode.FUNCTION_FAILED,
                message=f"Notification failed: {body.get('error') or result.message}",
                recoverable=True,
            )
        log.info(
            "notification_dispatched",
            entry_id=entry.id,
            sent=result.sent,
            failed=result.failed,
        )
        return result
