# src/agentfails/models/vote.py
"""Models capturing upvotes on posts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from agentfails.db.session import Base, utcnow


class Vote(Base):
    """Per-wallet upvote on a post; existence means "has upvoted"."""

    __tablename__ = "vote"
    __table_args__ = (Index("ix_vote_post_id", "post_id"),)

    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )

    # Composite primary key prevents duplicate votes from the same wallet.
    voter_wallet: Mapped[str] = mapped_column(String(42), primary_key=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
