from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ImportRequest(BaseModel):
    start: int = 1
    end: int = 100

    @model_validator(mode="after")
    def validate_range(self) -> ImportRequest:
        if self.start < 1:
            raise ValueError("start must be >= 1")
        if self.end < self.start:
            raise ValueError("end must be >= start")
        return self


class ImportResult(BaseModel):
    success: bool
    imported: int = 0
    message: str = ""


class RecipientStatus(BaseModel):
    email: str
    success: bool
    error: str | None = None


class NotificationDetails(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success_count: int = Field(default=0, alias="successCount")
    failure_count: int = Field(default=0, alias="failureCount")
    results: list[RecipientStatus] = []


class NotificationResult(BaseModel):
    success: bool
    message: str = ""
    details: NotificationDetails | None = None

    @property
    def sent(self) -> int:
        return self.details.success_count if self.details else 0

    @property
    def failed(self) -> int:
        return self.details.failure_count if self.details else 0
