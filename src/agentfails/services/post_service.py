"""Service-level helpers for the gated write path on posts."""
from __future__ import annotations

import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from agentfails.models import Comment, Post, Report, Vote
from agentfails.schemas.comment import CommentCreate
from agentfails.schemas.post import PostCreate
from agentfails.schemas.report import ReportCreate
from agentfails.services.payments import PAYMENT_CURRENCY, format_usdc
from agentfails.services.phase import record_post
from agentfails.services.policy import AccessPolicy

logger = logging.getLogger(__name__)

VOTE_ADDED = "added"
VOTE_REMOVED = "removed"


async def submit_post(
    db: Session,
    *,
    policy: AccessPolicy,
    data: PostCreate,
    proof: str | None,
) -> Post:
    """Create a post after the access policy and any payment have cleared.

    Args:
        db: Database session; the caller commits.
        policy: Access policy deciding whether the post is free.
        data: Validated post payload.
        proof: Payment transaction hash from the ``X-Payment`` header, if any.

    Returns:
        The flushed post.

    Raises:
        PaymentRequiredError: Payment (or membership) is required but missing.
        PaymentInvalidError: The supplied proof was rejected or already used.
    """
    decision = await policy.decide_post(db, data.submitter_wallet)
    settled = None
    if decision.requires_payment:
        settled = await policy.settle(db, decision, proof, wallet=data.submitter_wallet)

    post = Post(
        title=data.title,
        caption=data.caption,
        image_url=data.image_url,
        source_link=data.source_link,
        agent=data.agent_name.strip().lower(),
        fail_type=data.fail_type,
        submitter_wallet=data.submitter_wallet,
        payer_wallet=settled.payer if settled else None,
        upvote_count=0,
        payment_tx_hash=settled.proof.lower() if settled else None,
        payment_amount=format_usdc(settled.amount) if settled else None,
        payment_currency=PAYMENT_CURRENCY if settled else None,
    )
    record_post(db)
    db.add(post)
    db.flush()
    logger.info("Post %s accepted (%s)", post.id, decision.reason)
    return post


def _adjust_upvotes(db: Session, post: Post, delta: int) -> int:
    statement = update(Post).where(Post.id == post.id)
    if delta < 0:
        statement = statement.where(Post.upvote_count > 0)
    db.execute(
        statement.values(upvote_count=Post.upvote_count + delta).execution_options(
            synchronize_session=False
        )
    )
    db.refresh(post, attribute_names=["upvote_count"])
    return int(post.upvote_count)


def toggle_upvote(db: Session, *, post: Post, wallet: str) -> tuple[str, int]:
    """Add the wallet's upvote, or remove it if present.

    The vote row and the counter move together so ``upvote_count`` always
    equals the number of live votes. A duplicate insert counts as already voted.

    Returns:
        ``(action, count)`` where action is ``"added"`` or ``"removed"``.
    """
    existing = db.get(Vote, (post.id, wallet))
    if existing is not None:
        db.delete(existing)
        db.flush()
        return VOTE_REMOVED, _adjust_upvotes(db, post, -1)

    try:
        with db.begin_nested():
            db.add(Vote(post_id=post.id, voter_wallet=wallet))
    except IntegrityError:
        db.refresh(post, attribute_names=["upvote_count"])
        return VOTE_ADDED, int(post.upvote_count)
    return VOTE_ADDED, _adjust_upvotes(db, post, 1)


async def add_comment(
    db: Session,
    *,
    policy: AccessPolicy,
    post: Post,
    data: CommentCreate,
    proof: str | None,
) -> Comment:
    """Create a paid comment on a post."""
    decision = policy.decide_comment()
    settled = await policy.settle(db, decision, proof, wallet=data.author_wallet)

    comment = Comment(
        post_id=post.id,
        content=data.content,
        author_wallet=data.author_wallet,
        author_name=data.author_name or None,
        payment_tx_hash=settled.proof.lower(),
    )
    db.add(comment)
    db.flush()
    return comment


def file_report(db: Session, *, post: Post, data: ReportCreate) -> Report:
    """Append a report against a post."""
    report = Report(
        post_id=post.id,
        reporter_wallet=data.reporter_wallet,
        reason=data.reason or None,
    )
    db.add(report)
    db.flush()
    logger.info("Post %s reported by %s", post.id, data.reporter_wallet)
    return report
