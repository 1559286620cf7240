"""Site statistics schema."""
from __future__ import annotations

from pydantic import BaseModel


class StatsResponse(BaseModel):
    """Totals and pricing-phase information for the stats bar."""

    total_posts: int
    total_members: int
    total_upvotes: int
    free_threshold: int
    posts_until_paid: int
    early_access: bool
    pricing: dict[str, str]
