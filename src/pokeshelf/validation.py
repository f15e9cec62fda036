"""Profile form checks shared by every profile editor."""

from __future__ import annotations

import re
from datetime import date
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pokeshelf.models.profile import ProfileForm

_NAME_PATTERN = re.compile(r"^[a-zA-Z\s'-]+$")
_WHITESPACE = re.compile(r"\s+")

IMAGE_CONTENT_TYPES = frozenset({"image/jpeg", "image/png", "image/webp"})
MAX_IMAGE_BYTES = 5 * 1024 * 1024

MIN_AGE = 18
MAX_AGE = 120


def validate_profile_form(form: ProfileForm) -> dict[str, str]:
    """Return ``{field: message}`` for every invalid field; empty when valid."""
    errors: dict[str, str] = {}

    full_name = form.full_name.strip()
    if not full_name:
        errors["full_name"] = "Name is required"
    elif len(full_name) < 2:
        errors["full_name"] = "Name must be at least 2 characters long"
    elif not _NAME_PATTERN.match(full_name):
        errors["full_name"] = "Name can only contain letters, spaces, hyphens, and apostrophes"

    age = form.age.strip()
    if not age:
        errors["age"] = "Age is required"
    else:
        match = re.match(r"^[+-]?\d+", age)
        if match is None:
            errors["age"] = "Age must be a valid number"
        elif int(match.group()) < MIN_AGE:
            errors["age"] = f"You must be at least {MIN_AGE} years old"
        elif int(match.group()) > MAX_AGE:
            errors["age"] = "Please enter a valid age"

    if not form.city.strip():
        errors["city"] = "City is required"
    elif not form.city_lat or not form.city_lng:
        errors["city"] = "Please select a city from the suggestions"

    return errors


def validate_image_file(content_type: str, size: int) -> str | None:
    """Return an error message for an unacceptable upload, else ``None``."""
    if content_type not in IMAGE_CONTENT_TYPES:
        return "Please upload a JPG, PNG, or WebP image"
    if size > MAX_IMAGE_BYTES:
        return "Image must be smaller than 5MB"
    return None


def sanitize_input(value: str) -> str:
    return _WHITESPACE.sub(" ", value.strip())


def age_from_birth_date(birth_date: date, today: date | None = None) -> int:
    today = today or date.today()
    age = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


def birth_date_from_age(age: int, today: date | None = None) -> date:
    """January 1st of the year the user would have been born."""
    today = today or date.today()
    return date(today.year - age, 1, 1)
