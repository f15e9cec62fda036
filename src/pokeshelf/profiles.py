from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from pokeshelf.backend import eq
from pokeshelf.errors import ErrorCode, PokeShelfError
from pokeshelf.models.profile import WRITABLE_PROFILE_COLUMNS, Profile

if TYPE_CHECKING:
    from pokeshelf.backend import BackendClient
    from pokeshelf.models.profile import ProfileUpdate
    from pokeshelf.models.session import UserSession

log = structlog.get_logger()

PROFILES_TABLE = "profiles"


def _require_session(session: UserSession | None) -> UserSession:
    if session is None:
        raise PokeShelfError(
            code=ErrorCode.NOT_AUTHENTICATED,
            message="User not authenticated",
            suggestion="Sign in to manage your profile.",
        )
    return session


class ProfileService:
    def __init__(self, backend: BackendClient) -> None:
        self._backend = backend

    async def fetch_or_create(self, session: UserSession | None) -> Profile:
        """Read the caller's profile row, creating a bare one on first sign-in."""
        session = _require_session(session)
        filters = {"id": eq(session.user_id)}
        row = await self._backend.select_one(PROFILES_TABLE, filters=filters)
        if row is None:
            await self._backend.insert(
                PROFILES_TABLE, {"id": session.user_id, "email": session.email}
            )
            log.info("profile_created", user_id=session.user_id)
            row = await self._backend.select_one(PROFILES_TABLE, filters=filters)
            if row is None:
                raise PokeShelfError(
                    code=ErrorCode.ENTRY_NOT_FOUND,
                    message="Profile could not be read back after creation",
                    recoverable=True,
                )
        return Profile.model_validate(row)

    async def update(self, session: UserSession | None, updates: ProfileUpdate) -> Profile:
        """Write the changed fields; columns outside the writable set are dropped."""
        session = _require_session(session)
        changes = updates.model_dump(mode="json", exclude_unset=True)
        values = {key: value for key, value in changes.items() if key in WRITABLE_PROFILE_COLUMNS}
        dropped = sorted(set(changes) - set(values))
        if dropped:
            log.debug("profile_update_fields_dropped", fields=dropped)
        if not values:
            return await self.fetch_or_create(session)

        rows = await self._backend.update(
            PROFILES_TABLE, values, filters={"id": eq(session.user_id)}
        )
        if not rows:
            raise PokeShelfError(
                code=ErrorCode.ENTRY_NOT_FOUND,
                message="Profile not found",
                suggestion="Reload the profile and try again.",
            )
        log.info("profile_updated", user_id=session.user_id, fields=sorted(values))
        return Profile.model_validate(rows[0])
