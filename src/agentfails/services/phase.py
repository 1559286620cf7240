"""Pricing phase derived from the site-wide post counter."""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from agentfails.core.settings import settings
from agentfails.models import Post, SiteCounter


@dataclass(frozen=True)
class Phase:
    """Snapshot of the pricing phase at decision time."""

    total_posts: int
    threshold: int

    @property
    def is_early_access(self) -> bool:
        """Posting and signup are free while below the threshold."""
        return self.total_posts < self.threshold

    @property
    def posts_until_paid(self) -> int:
        return max(0, self.threshold - self.total_posts)


def get_site_counter(db: Session) -> SiteCounter:
    """Get or create the site counter entry.

    A missing row is seeded from the live post count so that existing
    databases keep their phase.
    """
    counter = db.query(SiteCounter).filter(SiteCounter.id == 1).first()
    if counter is None:
        existing = db.query(func.count(Post.id)).scalar() or 0
        counter = SiteCounter(id=1, total_posts=int(existing))
        db.add(counter)
        db.flush()
    return counter


def current_phase(db: Session, threshold: int | None = None) -> Phase:
    """Return the phase as seen by the current transaction."""
    counter = get_site_counter(db)
    return Phase(
        total_posts=int(counter.total_posts),
        threshold=settings.free_threshold if threshold is None else threshold,
    )


def record_post(db: Session) -> None:
    """Atomically bump the post counter within the caller's transaction."""
    get_site_counter(db)
    db.execute(
        update(SiteCounter)
        .where(SiteCounter.id == 1)
        .values(total_posts=SiteCounter.total_posts + 1)
        .execution_options(synchronize_session="fetch")
    )
