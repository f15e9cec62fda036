from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class UserSession(BaseModel):
    """Identity of the signed-in user, as issued by the auth service."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    email: str | None = None
    access_token: str | None = None
