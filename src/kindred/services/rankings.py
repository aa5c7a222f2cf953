"""Popular and trending rankings over publicly visible posts."""
from __future__ import annotations

from datetime import datetime, timedelta

from kindred.core.settings import settings
from kindred.db.time import utcnow
from kindred.repositories.post_repo import PostRepository
from kindred.schemas.post import FeedPost, RankedPost, TrendingWindow
from kindred.services.feed import enrich_posts
from kindred.services.visibility import VisibilityPolicy

WEEK_DAYS = 7
MONTH_DAYS = 30


def window_start(window: TrendingWindow, now: datetime) -> datetime:
    """Return the earliest creation time included in a trending window."""
    if window == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if window == "week":
        return now - timedelta(days=WEEK_DAYS)
    return now - timedelta(days=MONTH_DAYS)


def _rank(scored: list[tuple[int, FeedPost]], limit: int) -> list[RankedPost]:
    # sorted() is stable, so ties keep newest-first order.
    ordered = sorted(scored, key=lambda item: item[0], reverse=True)[: max(limit, 0)]
    return [
        RankedPost(**post.model_dump(), rank=index, score=score)
        for index, (score, post) in enumerate(ordered, start=1)
    ]


def popular_posts(
    repo: PostRepository,
    viewer_id: str | None,
    *,
    limit: int | None = None,
) -> list[RankedPost]:
    """Rank approved posts by their total number of reactions."""
    posts = VisibilityPolicy.public(viewer_id).apply(repo.list_recent())
    enriched = enrich_posts(repo, posts, viewer_id)
    scored = [(post.likes_count, post) for post in enriched]
    return _rank(scored, settings.popular_limit if limit is None else limit)


def trending_posts(
    repo: PostRepository,
    viewer_id: str | None,
    *,
    window: TrendingWindow = "week",
    now: datetime | None = None,
    limit: int | None = None,
) -> list[RankedPost]:
    """Rank recent approved posts by reactions plus weighted top-level comments."""
    since = window_start(window, now or utcnow())
    posts = VisibilityPolicy.public(viewer_id).apply(repo.list_recent(since=since))
    enriched = enrich_posts(repo, posts, viewer_id)
    weight = settings.trending_comment_weight
    scored = [(post.likes_count + post.comments_count * weight, post) for post in enriched]
    return _rank(scored, settings.trending_limit if limit is None else limit)
