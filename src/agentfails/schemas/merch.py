"""Merch checkout and holder-hint schemas."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .common import validate_wallet


class CheckoutRequest(BaseModel):
    """Schema for starting a shirt checkout."""

    model_config = ConfigDict(str_strip_whitespace=True)

    size: str = Field(..., min_length=1)
    wallet: str | None = Field(None, description="Wallet to register as a shirt member")

    @field_validator("wallet")
    @classmethod
    def _check_wallet(cls, value: str | None) -> str | None:
        return validate_wallet(value, "wallet")


class CheckoutResponse(BaseModel):
    """Hosted checkout URL."""

    url: str


class HolderCheckResponse(BaseModel):
    """Whether a wallet currently holds the collection NFT."""

    is_holder: bool = Field(serialization_alias="isHolder")
    balance: int
