"""Translate feed views into sorted, paginated post queries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

from sqlalchemy import desc, func
from sqlalchemy.orm import Query, Session

from agentfails.core.settings import settings
from agentfails.models import Post

SORT_HOT: Final[str] = "hot"
SORT_NEW: Final[str] = "new"

FEATURED_AGENT: Final[str] = "openclaw"

# view name -> (default sort, agent filter, negate filter)
_VIEWS: Final[dict[str, tuple[str, str | None, bool]]] = {
    "hot": (SORT_HOT, None, False),
    "hof": (SORT_HOT, None, False),
    "hall-of-fame": (SORT_HOT, None, False),
    "new": (SORT_NEW, None, False),
    "openclaw": (SORT_NEW, FEATURED_AGENT, False),
    "other": (SORT_NEW, FEATURED_AGENT, True),
}

FEED_VIEWS: Final[tuple[str, ...]] = tuple(_VIEWS)
FEED_SORTS: Final[tuple[str, ...]] = (SORT_HOT, SORT_NEW)


@dataclass(frozen=True)
class FeedQuery:
    """Resolved sort order, filter and page bounds for a feed request."""

    view: str
    sort: str
    agent: str | None
    exclude_agent: bool
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return self.page * self.page_size


@dataclass(frozen=True)
class FeedPage:
    """One page of a feed."""

    posts: list[Post]
    page: int
    next_page: int | None
    total: int


def build_feed_query(
    view: str,
    *,
    page: int = 0,
    sort: str | None = None,
    agent: str | None = None,
    page_size: int | None = None,
) -> FeedQuery:
    """Resolve a view name into a feed query.

    Agent-scoped views sort by creation time unless ``sort`` says otherwise;
    the sort override is ignored for the upvote-ranked views.

    Raises:
        ValueError: If the view or sort is unknown, or the page is negative.
    """
    if view not in _VIEWS:
        raise ValueError(f"view must be one of: {', '.join(FEED_VIEWS)}")
    if sort is not None and sort not in FEED_SORTS:
        raise ValueError(f"sort must be one of: {', '.join(FEED_SORTS)}")
    if page < 0:
        raise ValueError("page must be non-negative")

    default_sort, view_agent, exclude = _VIEWS[view]
    resolved_sort = default_sort
    if view_agent is not None and sort is not None:
        resolved_sort = sort

    resolved_agent = view_agent
    if view_agent is None and agent:
        resolved_agent = agent.strip().lower()

    return FeedQuery(
        view=view,
        sort=resolved_sort,
        agent=resolved_agent,
        exclude_agent=exclude,
        page=page,
        page_size=page_size or settings.feed_page_size,
    )


def _apply(query: Query, feed: FeedQuery) -> Query:
    if feed.agent is not None:
        query = query.filter(Post.agent != feed.agent if feed.exclude_agent else Post.agent == feed.agent)
    return query


def fetch_feed(db: Session, feed: FeedQuery) -> FeedPage:
    """Execute a feed query and return the requested page."""
    base = _apply(db.query(Post), feed)
    total = _apply(db.query(func.count(Post.id)), feed).scalar() or 0

    if feed.sort == SORT_HOT:
        ordering = (desc(Post.upvote_count), desc(Post.created_at), desc(Post.id))
    else:
        ordering = (desc(Post.created_at), desc(Post.id))

    posts = base.order_by(*ordering).offset(feed.offset).limit(feed.page_size).all()
    next_page = feed.page + 1 if len(posts) == feed.page_size else None
    return FeedPage(posts=posts, page=feed.page, next_page=next_page, total=int(total))
