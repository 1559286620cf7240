# src/agentfails/models/member.py
"""SQLAlchemy models for wallet memberships."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from agentfails.db.session import Base, utcnow

MEMBERSHIP_PAID = "paid"
MEMBERSHIP_EARLY_ADOPTER = "early_adopter"
MEMBERSHIP_ANONS_HOLDER = "anons_holder"
MEMBERSHIP_SHIRT_BUYER = "shirt_buyer"

MEMBERSHIP_CLASSES = (
    MEMBERSHIP_PAID,
    MEMBERSHIP_EARLY_ADOPTER,
    MEMBERSHIP_ANONS_HOLDER,
    MEMBERSHIP_SHIRT_BUYER,
)


class Member(Base):
    """A wallet granted write privileges.

    The membership class records how the wallet joined and never changes
    afterwards. Whether an NFT holder is currently exempt from posting fees is
    decided per request, not stored here.
    """

    __tablename__ = "member"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Always lower-cased.
    wallet_address: Mapped[str] = mapped_column(String(42), unique=True, nullable=False)
    membership_type: Mapped[str] = mapped_column(String(32), nullable=False)
    payment_tx_hash: Mapped[str | None] = mapped_column(Text, unique=True, nullable=True)
    payment_amount: Mapped[str] = mapped_column(String(16), nullable=False, default="0.00")
    payment_currency: Mapped[str] = mapped_column(String(8), nullable=False, default="USDC")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )
