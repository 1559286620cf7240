# src/agentfails/models/fulfillment.py
"""Models tracking merch orders triggered by checkout webhooks."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentfails.db.session import Base, utcnow

FULFILLMENT_RECEIVED = "received"
FULFILLMENT_ORDERED = "ordered"
FULFILLMENT_FAILED = "failed"


class Fulfillment(Base):
    """One row per completed checkout session; keyed for idempotent redelivery."""

    __tablename__ = "fulfillment"

    session_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FULFILLMENT_RECEIVED)
    wallet_address: Mapped[str | None] = mapped_column(String(42), nullable=True)
    provider_order_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    error: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
