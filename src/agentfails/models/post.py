# src/agentfails/models/post.py
"""SQLAlchemy models for submitted agent fails."""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentfails.db.session import Base, utcnow

FAIL_TYPES = (
    "hallucination",
    "confident",
    "loop",
    "apology",
    "uno_reverse",
    "unhinged",
    "other",
)


class Post(Base):
    """A screenshot of an AI agent failing, submitted to the feed."""

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint("upvote_count >= 0", name="ck_post_upvote_count_non_negative"),
        Index("ix_post_upvote_count", "upvote_count"),
        Index("ix_post_created_at", "created_at"),
        Index("ix_post_agent", "agent"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    caption: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str] = mapped_column(Text, nullable=False)
    source_link: Mapped[str] = mapped_column(Text, nullable=False)
    agent: Mapped[str] = mapped_column(String(64), nullable=False)
    fail_type: Mapped[str] = mapped_column(String(32), nullable=False)

    # NULL for pure-agent submissions paid through the X-Payment header.
    submitter_wallet: Mapped[str | None] = mapped_column(String(42), nullable=True)
    payer_wallet: Mapped[str | None] = mapped_column(String(42), nullable=True)

    # Maintained by explicit increment/decrement alongside vote rows.
    upvote_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    payment_tx_hash: Mapped[str | None] = mapped_column(Text, unique=True, nullable=True)
    payment_amount: Mapped[str | None] = mapped_column(String(16), nullable=True)
    payment_currency: Mapped[str | None] = mapped_column(String(8), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
