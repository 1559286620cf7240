# src/agentfails/models/payment_claim.py
"""Models supporting payment replay protection."""

from datetime import datetime

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentfails.db.session import Base, utcnow


class PaymentClaim(Base):
    """Record indicating that a payment proof already backs an action.

    (action, proof) -> existence means "already used". The composite primary
    key makes claiming a proof an atomic insert-or-reject.
    """

    __tablename__ = "payment_claim"

    action: Mapped[str] = mapped_column(String(16), primary_key=True)
    proof: Mapped[str] = mapped_column(Text, primary_key=True)
    wallet: Mapped[str | None] = mapped_column(String(42), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
