# src/agentfails/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentfails.core.settings import settings
from agentfails.models.post import FAIL_TYPES

from .common import normalize_wallet


class PostCreate(BaseModel):
    """Schema for submitting a new fail."""

    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=settings.title_max_length)
    caption: str | None = Field(None, description="Optional caption")
    image_url: str = Field(..., min_length=1)
    source_link: str = Field(..., min_length=1)
    agent_name: str = Field(..., min_length=1, max_length=64, description="e.g. claude, openclaw")
    fail_type: str = Field(..., description="One of the fixed fail categories")
    submitter_wallet: str | None = Field(
        None,
        description="Member wallet; omit for agent submissions paid per post",
    )

    @field_validator("fail_type")
    @classmethod
    def _check_fail_type(cls, value: str) -> str:
        if value not in FAIL_TYPES:
            raise ValueError(f"fail_type must be one of: {', '.join(FAIL_TYPES)}")
        return value

    @field_validator("submitter_wallet")
    @classmethod
    def _normalize_wallet(cls, value: str | None) -> str | None:
        return normalize_wallet(value)

    @field_validator("caption")
    @classmethod
    def _blank_caption(cls, value: str | None) -> str | None:
        return value or None


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    caption: str | None
    image_url: str
    source_link: str
    agent: str
    fail_type: str
    submitter_wallet: str | None
    payer_wallet: str | None = None
    upvote_count: int
    payment_tx_hash: str | None = None
    payment_amount: str | None = None
    payment_currency: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FeedResponse(BaseModel):
    """One page of the feed."""

    posts: list[PostResponse]
    view: str
    sort: str
    page: int
    next_page: int | None
    total: int
