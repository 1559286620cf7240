# src/agentfails/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .comments import router as comments_router
from .holders import router as holders_router
from .merch import router as merch_router
from .posts import router as posts_router
from .reports import router as reports_router
from .signup import router as members_router
from .stats import router as stats_router
from .votes import router as votes_router

__all__ = [
    "comments_router",
    "holders_router",
    "members_router",
    "merch_router",
    "posts_router",
    "reports_router",
    "stats_router",
    "votes_router",
]
