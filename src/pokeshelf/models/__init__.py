from __future__ import annotations

from pokeshelf.models.catalog import CatalogEntry, CatalogStats
from pokeshelf.models.functions import (
    ImportRequest,
    ImportResult,
    NotificationDetails,
    NotificationResult,
    RecipientStatus,
)
from pokeshelf.models.membership import MembershipRecord
from pokeshelf.models.profile import Profile, ProfileForm, ProfileUpdate
from pokeshelf.models.session import UserSession

__all__ = [
    # catalog
    "CatalogEntry",
    "CatalogStats",
    # membership
    "MembershipRecord",
    # profile
    "Profile",
    "ProfileForm",
    "ProfileUpdate",
    # session
    "UserSession",
    # functions
    "ImportRequest",
    "ImportResult",
    "NotificationDetails",
    "NotificationResult",
    "RecipientStatus",
]
