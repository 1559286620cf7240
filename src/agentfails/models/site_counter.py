# src/agentfails/models/site_counter.py
"""Site-wide bookkeeping counters."""

from sqlalchemy import Integer
from sqlalchemy.orm import Mapped, mapped_column

from agentfails.db.session import Base


class SiteCounter(Base):
    """Monotonic counters used to derive the current pricing phase."""

    __tablename__ = "site_counter"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    total_posts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
