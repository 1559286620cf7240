# src/agentfails/models/__init__.py
"""SQLAlchemy models for the Agent Fails application."""

from .comment import Comment
from .fulfillment import Fulfillment
from .member import Member
from .payment_claim import PaymentClaim
from .post import Post
from .report import Report
from .site_counter import SiteCounter
from .vote import Vote

__all__ = [
    "Comment",
    "Fulfillment",
    "Member",
    "PaymentClaim",
    "Post",
    "Report",
    "SiteCounter",
    "Vote",
]
