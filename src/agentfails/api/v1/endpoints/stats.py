# src/agentfails/api/v1/endpoints/stats.py
"""Site statistics endpoint."""

from fastapi import APIRouter, Response
from sqlalchemy import func

from agentfails.core.settings import settings
from agentfails.models import Member, Post
from agentfails.schemas.stats import StatsResponse
from agentfails.services.payments import format_usdc
from agentfails.services.phase import current_phase

from ..dependencies import SessionDep, set_cache_headers

router = APIRouter(tags=["system"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(response: Response, db: SessionDep) -> StatsResponse:
    """Return totals and the current pricing phase."""
    phase = current_phase(db)
    total_members = db.query(func.count(Member.id)).scalar() or 0
    total_upvotes = db.query(func.coalesce(func.sum(Post.upvote_count), 0)).scalar() or 0
    set_cache_headers(response)
    return StatsResponse(
        total_posts=phase.total_posts,
        total_members=int(total_members),
        total_upvotes=int(total_upvotes),
        free_threshold=phase.threshold,
        posts_until_paid=phase.posts_until_paid,
        early_access=phase.is_early_access,
        pricing={action: format_usdc(amount) for action, amount in settings.pricing.items()},
    )
