# src/agentfails/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    comments_router,
    holders_router,
    members_router,
    merch_router,
    posts_router,
    reports_router,
    stats_router,
    votes_router,
)

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
