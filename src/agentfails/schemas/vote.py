# src/agentfails/schemas/vote.py
"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import validate_wallet


class VoteRequest(BaseModel):
    """Schema for toggling an upvote."""

    model_config = ConfigDict(str_strip_whitespace=True)

    wallet_address: str = Field(..., min_length=1, description="Voting member wallet")

    @field_validator("wallet_address")
    @classmethod
    def _check_wallet(cls, value: str) -> str:
        return validate_wallet(value, "wallet_address") or value


class VoteResponse(BaseModel):
    """Result of an upvote toggle."""

    ok: bool = True
    action: Literal["added", "removed"]
    count: int
