"""Read paths for posts.

Every list is built the same way: fetch raw rows, run them through the
``VisibilityPolicy`` for the view, then enrich the survivors with author
profiles, reaction counts, the viewer's own reaction and comment counts.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session

from kindred.core.errors import NotFoundError
from kindred.models import Like, Post, Profile, ReactionType
from kindred.repositories.post_repo import PostRepository
from kindred.schemas.common import AuthorSummary
from kindred.schemas.post import FeedPost, PostResponse, ReactionCounts, RejectedPost
from kindred.services.moderation import rejection_reasons
from kindred.services.visibility import VisibilityPolicy, can_view_post

FeedPostT = TypeVar("FeedPostT", bound=FeedPost)


def author_summaries(db: Session, user_ids: Iterable[str]) -> dict[str, AuthorSummary]:
    """Return display summaries keyed by user id; unknown users get an empty summary."""
    wanted = set(user_ids)
    if not wanted:
        return {}
    profiles = db.scalars(select(Profile).where(Profile.id.in_(wanted)))
    summaries = {
        profile.id: AuthorSummary(
            id=profile.id,
            full_name=profile.full_name,
            avatar_url=profile.avatar_url,
        )
        for profile in profiles
    }
    for user_id in wanted - summaries.keys():
        summaries[user_id] = AuthorSummary(id=user_id)
    return summaries


def count_reactions(likes: Iterable[Like]) -> ReactionCounts:
    """Tally reactions by kind, ignoring unknown kinds."""
    counts = {kind.value: 0 for kind in ReactionType}
    for like in likes:
        if like.reaction_type in counts:
            counts[like.reaction_type] += 1
    return ReactionCounts(**counts)


def enrich_posts(
    repo: PostRepository,
    posts: Sequence[Post],
    viewer_id: str | None,
    model: type[FeedPostT] = FeedPost,  # type: ignore[assignment]
) -> list[FeedPostT]:
    """Attach author, reaction and comment aggregates to already-admitted posts."""
    post_ids = [post.id for post in posts]
    likes_by_post: dict[str, list[Like]] = defaultdict(list)
    for like in repo.reactions_for(post_ids):
        likes_by_post[like.post_id].append(like)
    comment_counts = repo.top_level_comment_counts(post_ids)
    authors = author_summaries(repo.session, (post.author_id for post in posts))

    enriched: list[FeedPostT] = []
    for post in posts:
        likes = likes_by_post[post.id]
        user_reaction = next(
            (like.reaction_type for like in likes if viewer_id and like.user_id == viewer_id),
            None,
        )
        extra: dict[str, object] = {}
        if issubclass(model, RejectedPost):
            extra["rejection_reasons"] = rejection_reasons(post.moderation_result)
        enriched.append(
            model(
                **PostResponse.model_validate(post).model_dump(),
                author=authors[post.author_id],
                reactions_count=count_reactions(likes),
                likes_count=len(likes),
                user_reaction=user_reaction,
                comments_count=comment_counts[post.id],
                **extra,
            )
        )
    return enriched


def build_feed(repo: PostRepository, viewer_id: str | None) -> list[FeedPost]:
    """Return every approved post, newest first."""
    posts = VisibilityPolicy.public(viewer_id).apply(repo.list_recent())
    return enrich_posts(repo, posts, viewer_id)


def own_posts(repo: PostRepository, viewer_id: str | None) -> list[FeedPost]:
    """Return the viewer's approved and pending posts, newest first."""
    policy = VisibilityPolicy.owner(viewer_id)
    posts = policy.apply(repo.list_recent(author_id=viewer_id))
    return enrich_posts(repo, posts, viewer_id)


def own_rejected_posts(repo: PostRepository, viewer_id: str | None) -> list[RejectedPost]:
    """Return the viewer's rejected posts with the reasons they were flagged."""
    policy = VisibilityPolicy.owner_rejected(viewer_id)
    posts = policy.apply(repo.list_recent(author_id=viewer_id))
    return enrich_posts(repo, posts, viewer_id, model=RejectedPost)


def user_posts(repo: PostRepository, user_id: str, viewer_id: str | None) -> list[FeedPost]:
    """Return a user's approved posts as anyone, the user included, sees them."""
    posts = VisibilityPolicy.public(viewer_id).apply(repo.list_recent(author_id=user_id))
    return enrich_posts(repo, posts, viewer_id)


def get_visible_post(repo: PostRepository, post_id: str, viewer_id: str | None) -> Post:
    """Return a post the viewer may see.

    Raises:
        NotFoundError: If the post does not exist or is hidden from the viewer.
    """
    post = repo.get_by_id(post_id)
    if post is None or not can_view_post(post, viewer_id):
        raise NotFoundError("Post not found")
    return post


def post_detail(repo: PostRepository, post_id: str, viewer_id: str | None) -> FeedPost:
    """Return one enriched post the viewer may see."""
    post = get_visible_post(repo, post_id, viewer_id)
    return enrich_posts(repo, [post], viewer_id)[0]
