# src/agentfails/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Agent Fails API."""

from fastapi import APIRouter

from agentfails.schemas.vote import VoteRequest, VoteResponse
from agentfails.services.post_service import toggle_upvote

from ..dependencies import AccessPolicyDep, SessionDep, get_post_or_404

router = APIRouter(prefix="/posts", tags=["votes"])


@router.post("/{post_id}/upvote", response_model=VoteResponse)
async def upvote(
    post_id: int,
    data: VoteRequest,
    db: SessionDep,
    policy: AccessPolicyDep,
) -> VoteResponse:
    """Toggle the caller's upvote on a post. Members only, no payment."""
    post = get_post_or_404(db, post_id)
    policy.decide_vote(db, data.wallet_address)
    action, count = toggle_upvote(db, post=post, wallet=data.wallet_address)
    db.commit()
    return VoteResponse(action=action, count=count)
