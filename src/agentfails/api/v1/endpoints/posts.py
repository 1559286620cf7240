# src/agentfails/api/v1/endpoints/posts.py
"""Post-related endpoints for the Agent Fails API."""

from fastapi import APIRouter, HTTPException, Query, Response, status

from agentfails.schemas.post import FeedResponse, PostCreate, PostResponse
from agentfails.services.feed import build_feed_query, fetch_feed
from agentfails.services.post_service import submit_post

from ..dependencies import (
    AccessPolicyDep,
    PaymentProofDep,
    SessionDep,
    get_post_or_404,
    set_cache_headers,
)

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=FeedResponse)
async def list_posts(
    response: Response,
    db: SessionDep,
    view: str = Query("hot", description="hot, hof, hall-of-fame, new, openclaw or other"),
    page: int = Query(0, ge=0, description="Zero-based page number"),
    sort: str | None = Query(None, description="hot or new; agent views only"),
    agent: str | None = Query(None, description="Filter by agent label"),
) -> FeedResponse:
    """List one page of a feed view.

    Raises:
        HTTPException: If the view or sort is unknown.
    """
    try:
        feed = build_feed_query(view, page=page, sort=sort, agent=agent)
    except ValueError as err:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(err)) from err

    result = fetch_feed(db, feed)
    set_cache_headers(response)
    return FeedResponse(
        posts=[PostResponse.model_validate(post) for post in result.posts],
        view=feed.view,
        sort=feed.sort,
        page=result.page,
        next_page=result.next_page,
        total=result.total,
    )


@router.get("/{post_id}")
async def get_post(post_id: int, response: Response, db: SessionDep) -> dict[str, PostResponse]:
    """Get a specific post by ID."""
    post = get_post_or_404(db, post_id)
    set_cache_headers(response)
    return {"post": PostResponse.model_validate(post)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    db: SessionDep,
    policy: AccessPolicyDep,
    x_payment: PaymentProofDep = None,
) -> dict[str, PostResponse]:
    """Submit a fail.

    Members post for free during early access and while exempt; otherwise the
    request must carry the per-post payment in the ``X-Payment`` header.
    Requests without ``submitter_wallet`` are agent submissions and always pay.
    """
    post = await submit_post(db, policy=policy, data=data, proof=x_payment)
    db.commit()
    db.refresh(post)
    return {"post": PostResponse.model_validate(post)}
