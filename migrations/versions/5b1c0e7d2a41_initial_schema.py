"""initial schema

Revision ID: 5b1c0e7d2a41
Revises:
Create Date: 2026-02-20 10:12:44.318201

"""
from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "5b1c0e7d2a41"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create members, posts, votes, comments, reports and bookkeeping tables."""
    op.create_table(
        "member",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("wallet_address", sa.String(length=42), nullable=False),
        sa.Column("membership_type", sa.String(length=32), nullable=False),
        sa.Column("payment_tx_hash", sa.Text(), nullable=True),
        sa.Column("payment_amount", sa.String(length=16), nullable=False),
        sa.Column("payment_currency", sa.String(length=8), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("wallet_address"),
        sa.UniqueConstraint("payment_tx_hash"),
    )
    op.create_table(
        "post",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("caption", sa.Text(), nullable=True),
        sa.Column("image_url", sa.Text(), nullable=False),
        sa.Column("source_link", sa.Text(), nullable=False),
        sa.Column("agent", sa.String(length=64), nullable=False),
        sa.Column("fail_type", sa.String(length=32), nullable=False),
        sa.Column("submitter_wallet", sa.String(length=42), nullable=True),
        sa.Column("payer_wallet", sa.String(length=42), nullable=True),
        sa.Column("upvote_count", sa.Integer(), nullable=False),
        sa.Column("payment_tx_hash", sa.Text(), nullable=True),
        sa.Column("payment_amount", sa.String(length=16), nullable=True),
        sa.Column("payment_currency", sa.String(length=8), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("upvote_count >= 0", name="ck_post_upvote_count_non_negative"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("payment_tx_hash"),
    )
    op.create_index("ix_post_upvote_count", "post", ["upvote_count"])
    op.create_index("ix_post_created_at", "post", ["created_at"])
    op.create_index("ix_post_agent", "post", ["agent"])

    op.create_table(
        "vote",
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("voter_wallet", sa.String(length=42), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("post_id", "voter_wallet"),
    )
    op.create_index("ix_vote_post_id", "vote", ["post_id"])

    op.create_table(
        "comment",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("author_wallet", sa.String(length=42), nullable=True),
        sa.Column("author_name", sa.String(length=64), nullable=True),
        sa.Column("payment_tx_hash", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("payment_tx_hash"),
    )
    op.create_index("ix_comment_post_id", "comment", ["post_id"])

    op.create_table(
        "report",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("post_id", sa.Integer(), nullable=False),
        sa.Column("reporter_wallet", sa.String(length=42), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["post_id"], ["post.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "payment_claim",
        sa.Column("action", sa.String(length=16), nullable=False),
        sa.Column("proof", sa.Text(), nullable=False),
        sa.Column("wallet", sa.String(length=42), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("action", "proof"),
    )

    op.create_table(
        "site_counter",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("total_posts", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "fulfillment",
        sa.Column("session_id", sa.String(length=255), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False),
        sa.Column("wallet_address", sa.String(length=42), nullable=True),
        sa.Column("provider_order_id", sa.String(length=255), nullable=True),
        sa.Column("error", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("session_id"),
    )


def downgrade() -> None:
    """Drop every table created by this revision."""
    op.drop_table("fulfillment")
    op.drop_table("site_counter")
    op.drop_table("payment_claim")
    op.drop_table("report")
    op.drop_index("ix_comment_post_id", table_name="comment")
    op.drop_table("comment")
    op.drop_index("ix_vote_post_id", table_name="vote")
    op.drop_table("vote")
    op.drop_index("ix_post_agent", table_name="post")
    op.drop_index("ix_post_created_at", table_name="post")
    op.drop_index("ix_post_upvote_count", table_name="post")
    op.drop_table("post")
    op.drop_table("member")
