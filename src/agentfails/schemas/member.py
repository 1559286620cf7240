# src/agentfails/schemas/member.py
"""Membership-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import validate_wallet


class SignupRequest(BaseModel):
    """Schema for registering a wallet as a member."""

    model_config = ConfigDict(str_strip_whitespace=True)

    wallet_address: str = Field(..., min_length=1, description="Wallet joining the site")
    tx_hash: str | None = Field(None, description="USDC payment transaction hash")

    @field_validator("wallet_address")
    @classmethod
    def _check_wallet(cls, value: str) -> str:
        return validate_wallet(value, "wallet_address") or value


class MemberResponse(BaseModel):
    """Schema for member information returned by the API."""

    wallet_address: str
    membership_type: str
    payment_tx_hash: str | None = None
    payment_amount: str
    payment_currency: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
