# src/agentfails/schemas/comment.py
"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from agentfails.core.settings import settings

from .common import validate_wallet


class CommentCreate(BaseModel):
    """Schema for adding a paid comment."""

    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=settings.comment_max_length)
    author_wallet: str | None = None
    author_name: str | None = Field(None, max_length=64)

    @field_validator("author_wallet")
    @classmethod
    def _check_wallet(cls, value: str | None) -> str | None:
        return validate_wallet(value, "author_wallet")


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API."""

    id: int
    post_id: int
    content: str
    author_wallet: str | None
    author_name: str | None
    payment_tx_hash: str | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
