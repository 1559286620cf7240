# src/agentfails/schemas/report.py
"""Report-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import validate_wallet


class ReportCreate(BaseModel):
    """Schema for reporting a post."""

    model_config = ConfigDict(str_strip_whitespace=True)

    reporter_wallet: str = Field(..., min_length=1)
    reason: str | None = Field(None, max_length=500)

    @field_validator("reporter_wallet")
    @classmethod
    def _check_wallet(cls, value: str) -> str:
        return validate_wallet(value, "reporter_wallet") or value


class ReportResponse(BaseModel):
    """Schema for a filed report."""

    id: int
    post_id: int
    reporter_wallet: str
    reason: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
