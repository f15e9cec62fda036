"""Error codes and the single exception type raised across pokeshelf."""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"
    ENTRY_NOT_FOUND = "ENTRY_NOT_FOUND"
    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    BACKEND_ERROR = "BACKEND_ERROR"
    FUNCTION_FAILED = "FUNCTION_FAILED"


class PokeShelfError(Exception):
    """Structured error carried up to the caller.

    ``recoverable`` tells the caller whether repeating the same action later
    may succeed (network blips) or not (bad input, missing rights).
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str = "",
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }
