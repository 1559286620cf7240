# src/agentfails/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .member import MemberResponse, SignupRequest
from .merch import CheckoutRequest, CheckoutResponse, HolderCheckResponse
from .post import FeedResponse, PostCreate, PostResponse
from .report import ReportCreate, ReportResponse
from .stats import StatsResponse
from .vote import VoteRequest, VoteResponse

__all__ = [
    "CheckoutRequest", "CheckoutResponse", "HolderCheckResponse",
    "CommentCreate", "CommentResponse",
    "FeedResponse", "PostCreate", "PostResponse",
    "MemberResponse", "SignupRequest",
    "ReportCreate", "ReportResponse",
    "StatsResponse",
    "VoteRequest", "VoteResponse",
]
