# tests/services/test_comment_service.py
"""Tests for threaded comments."""

from datetime import timedelta

import pytest
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from kindred.core.errors import ForbiddenError, InvalidInputError, NotFoundError
from kindred.models import Comment, CommentLike, PostStatus, Profile
from kindred.schemas.comment import CommentCreate
from kindred.services.comments import create_comment, delete_comment, list_comments, update_comment
from kindred.services.reactions import comment_like_state, toggle_comment_like


@pytest.fixture()
def post(make_post, alice: Profile):
    return make_post(alice)


class TestCreateComment:
    def test_top_level_and_reply(self, db_session: Session, post, alice: Profile, bob: Profile) -> None:
        top = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="  Great post  "))
        reply = create_comment(
            db_session,
            alice.id,
            CommentCreate(post_id=post.id, content="Thanks!", parent_id=top.id),
        )

        assert top.content == "Great post"
        assert top.author.full_name == "Bob"
        assert reply.parent_id == top.id

    def test_reply_to_reply_is_rejected(self, db_session: Session, post, alice: Profile, bob: Profile) -> None:
        top = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="one"))
        reply = create_comment(db_session, alice.id, CommentCreate(post_id=post.id, content="two", parent_id=top.id))

        with pytest.raises(InvalidInputError, match="one level"):
            create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="three", parent_id=reply.id))

        assert db_session.scalar(select(func.count()).select_from(Comment)) == 2

    def test_parent_must_belong_to_the_same_post(
        self, db_session: Session, make_post, post, alice: Profile, bob: Profile
    ) -> None:
        other = make_post(bob, "elsewhere")
        top = create_comment(db_session, bob.id, CommentCreate(post_id=other.id, content="there"))

        with pytest.raises(InvalidInputError):
            create_comment(db_session, alice.id, CommentCreate(post_id=post.id, content="x", parent_id=top.id))

    @pytest.mark.parametrize("content", ["", "   "])
    def test_empty_content(self, db_session: Session, post, bob: Profile, content: str) -> None:
        with pytest.raises(InvalidInputError):
            create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content=content))

    def test_missing_post_or_parent(self, db_session: Session, post, bob: Profile) -> None:
        with pytest.raises(NotFoundError):
            create_comment(db_session, bob.id, CommentCreate(post_id="missing", content="hi"))
        with pytest.raises(NotFoundError):
            create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="hi", parent_id="missing"))

    def test_cannot_comment_on_someone_elses_rejected_post(
        self, db_session: Session, make_post, alice: Profile, bob: Profile
    ) -> None:
        hidden = make_post(alice, "spam", status=PostStatus.REJECTED)
        with pytest.raises(NotFoundError):
            create_comment(db_session, bob.id, CommentCreate(post_id=hidden.id, content="hi"))

    def test_comments_on_a_hidden_post_cannot_be_liked_by_others(
        self, db_session: Session, make_post, alice: Profile, bob: Profile
    ) -> None:
        hidden = make_post(alice, "spam", status=PostStatus.REJECTED)
        own = create_comment(db_session, alice.id, CommentCreate(post_id=hidden.id, content="mine"))

        with pytest.raises(NotFoundError):
            toggle_comment_like(db_session, own.id, bob.id)
        with pytest.raises(NotFoundError):
            comment_like_state(db_session, own.id, bob.id)
        with pytest.raises(NotFoundError):
            comment_like_state(db_session, own.id, None)
        assert db_session.scalar(select(func.count()).select_from(CommentLike)) == 0

        assert toggle_comment_like(db_session, own.id, alice.id).like_count == 1


def test_list_comments_builds_two_level_threads(
    db_session: Session, post, alice: Profile, bob: Profile, carol: Profile
) -> None:
    first = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="first"))
    second = create_comment(db_session, carol.id, CommentCreate(post_id=post.id, content="second"))
    create_comment(db_session, alice.id, CommentCreate(post_id=post.id, content="reply", parent_id=first.id))
    toggle_comment_like(db_session, first.id, alice.id)

    threads = list_comments(db_session, post.id, None)

    assert [thread.content for thread in threads] == ["first", "second"]
    assert threads[0].like_count == 1
    assert threads[0].replies_count == 1
    assert threads[0].replies[0].content == "reply"
    assert threads[0].replies[0].replies == []
    assert threads[1].id == second.id
    assert threads[1].replies_count == 0


class TestEditAndDelete:
    def test_author_can_edit(self, db_session: Session, post, bob: Profile) -> None:
        comment = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="typo"))

        edited = update_comment(db_session, comment.id, bob.id, "fixed")

        assert edited.content == "fixed"
        assert edited.updated_at >= comment.updated_at

    def test_only_the_author_can_edit_or_delete(self, db_session: Session, post, alice: Profile, bob: Profile) -> None:
        comment = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="mine"))

        with pytest.raises(ForbiddenError):
            update_comment(db_session, comment.id, alice.id, "hijacked")
        with pytest.raises(ForbiddenError):
            delete_comment(db_session, comment.id, alice.id)

    def test_delete_removes_replies_and_likes(self, db_session: Session, post, alice: Profile, bob: Profile) -> None:
        top = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="top"))
        reply = create_comment(db_session, alice.id, CommentCreate(post_id=post.id, content="re", parent_id=top.id))
        toggle_comment_like(db_session, top.id, alice.id)
        toggle_comment_like(db_session, reply.id, bob.id)

        delete_comment(db_session, top.id, bob.id)

        assert db_session.scalar(select(func.count()).select_from(Comment)) == 0
        assert db_session.scalar(select(func.count()).select_from(CommentLike)) == 0
        with pytest.raises(NotFoundError):
            delete_comment(db_session, top.id, bob.id)

    def test_comments_under_a_post_that_became_hidden(
        self, db_session: Session, post, bob: Profile
    ) -> None:
        comment = create_comment(db_session, bob.id, CommentCreate(post_id=post.id, content="mine"))
        post.status = PostStatus.REJECTED.value
        db_session.commit()

        with pytest.raises(NotFoundError):
            update_comment(db_session, comment.id, bob.id, "edited")
        with pytest.raises(NotFoundError):
            delete_comment(db_session, comment.id, bob.id)
        assert db_session.get(Comment, comment.id).content == "mine"

    def test_edit_missing_comment(self, db_session: Session, bob: Profile) -> None:
        with pytest.raises(NotFoundError):
            update_comment(db_session, "missing", bob.id, "text")
