from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel

# Columns a user may change on their own profile row.
WRITABLE_PROFILE_COLUMNS = frozenset(
    {
        "username",
        "email",
        "birth_date",
        "location",
        "phone",
        "avatar_url",
        "banner_url",
        "bio",
    }
)


class Profile(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    username: str | None = None
    phone: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    banner_url: str | None = None
    website: str | None = None
    location: str | None = None
    birth_date: date | None = None
    is_public: bool = True
    role: str | None = None
    email_notifications: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class ProfileUpdate(BaseModel):
    full_name: str | None = None
    username: str | None = None
    phone: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    banner_url: str | None = None
    website: str | None = None
    location: str | None = None
    birth_date: date | None = None
    is_public: bool | None = None


class ProfileForm(BaseModel):
    """Raw values from the profile editor, validated by ``validate_profile_form``."""

    full_name: str = ""
    email: str = ""
    age: str = ""
    city: str = ""
    city_lat: float | None = None
    city_lng: float | None = None
    avatar_url: str = ""
