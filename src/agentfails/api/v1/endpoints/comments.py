# src/agentfails/api/v1/endpoints/comments.py
"""Comment endpoints for the Agent Fails API."""

from fastapi import APIRouter, Response, status

from agentfails.models import Comment
from agentfails.schemas.comment import CommentCreate, CommentResponse
from agentfails.services.post_service import add_comment

from ..dependencies import (
    AccessPolicyDep,
    PaymentProofDep,
    SessionDep,
    get_post_or_404,
    set_cache_headers,
)

router = APIRouter(prefix="/posts", tags=["comments"])


@router.get("/{post_id}/comments")
async def list_comments(
    post_id: int,
    response: Response,
    db: SessionDep,
) -> dict[str, list[CommentResponse]]:
    """List comments on a post, oldest first."""
    get_post_or_404(db, post_id)
    comments = (
        db.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .all()
    )
    set_cache_headers(response)
    return {"comments": [CommentResponse.model_validate(comment) for comment in comments]}


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    db: SessionDep,
    policy: AccessPolicyDep,
    x_payment: PaymentProofDep = None,
) -> dict[str, CommentResponse]:
    """Add a comment. Every comment pays the comment fee via ``X-Payment``."""
    post = get_post_or_404(db, post_id)
    comment = await add_comment(db, policy=policy, post=post, data=data, proof=x_payment)
    db.commit()
    db.refresh(comment)
    return {"comment": CommentResponse.model_validate(comment)}
