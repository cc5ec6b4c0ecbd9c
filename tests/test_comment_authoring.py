"""
Tests for writing comments and replies.
"""
import logging

import pytest
from sqlalchemy import func, select

from threadline.core.errors import InternalError, InvalidInputError, NotFoundError
from threadline.models import Comment
from threadline.services.comment_authoring import CommentAuthoring


def _comment_count(session) -> int:
    return session.execute(select(func.count(Comment.id))).scalar_one()


class TestCommentAuthoring:

    @pytest.fixture
    def setup(self, db_session, thread):
        author = thread.user()
        post = thread.post(author)
        return {"author": author, "post": post, "authoring": CommentAuthoring(db_session)}

    def test_create_root_comment(self, setup):
        comment = setup["authoring"].create_root_comment(setup["post"].id, "  first!  ", setup["author"].id)
        assert comment.id is not None
        assert comment.text == "first!"
        assert comment.postId == setup["post"].id
        assert comment.authorId == setup["author"].id
        assert comment.parentCommentId is None
        assert comment.createdAt is not None

    def test_ids_increase_with_creation_order(self, setup):
        authoring = setup["authoring"]
        first = authoring.create_root_comment(setup["post"].id, "a", setup["author"].id)
        second = authoring.create_root_comment(setup["post"].id, "b", setup["author"].id)
        assert second.id > first.id

    def test_root_comment_on_missing_post(self, setup, db_session):
        with pytest.raises(NotFoundError):
            setup["authoring"].create_root_comment(404, "hello", setup["author"].id)
        assert _comment_count(db_session) == 0

    @pytest.mark.parametrize("text", ["", "   ", None])
    def test_empty_text_is_invalid(self, setup, text):
        with pytest.raises(InvalidInputError):
            setup["authoring"].create_root_comment(setup["post"].id, text, setup["author"].id)

    def test_text_over_limit_is_invalid(self, db_session, setup):
        authoring = CommentAuthoring(db_session, max_length=5)
        with pytest.raises(InvalidInputError):
            authoring.create_root_comment(setup["post"].id, "too long", setup["author"].id)

    def test_reply_copies_post_from_parent(self, setup):
        authoring = setup["authoring"]
        root = authoring.create_root_comment(setup["post"].id, "root", setup["author"].id)
        reply = authoring.create_reply(root.id, "reply", setup["author"].id, setup["post"].id)
        assert reply.parentCommentId == root.id
        assert reply.postId == root.postId

    def test_replies_nest_without_depth_limit(self, setup):
        authoring = setup["authoring"]
        node = authoring.create_root_comment(setup["post"].id, "depth 0", setup["author"].id)
        for depth in range(1, 8):
            node = authoring.create_reply(node.id, f"depth {depth}", setup["author"].id, setup["post"].id)
        assert node.text == "depth 7"
        assert node.postId == setup["post"].id

    def test_reply_to_missing_comment(self, setup, db_session):
        with pytest.raises(NotFoundError):
            setup["authoring"].create_reply(12345, "hello?", setup["author"].id, setup["post"].id)
        assert _comment_count(db_session) == 0

    def test_reply_with_mismatched_post_is_rejected(self, setup, thread, db_session):
        other_post = thread.post(setup["author"], title="Other")
        authoring = setup["authoring"]
        root = authoring.create_root_comment(setup["post"].id, "root", setup["author"].id)

        with pytest.raises(NotFoundError):
            authoring.create_reply(root.id, "wrong thread", setup["author"].id, other_post.id)
        assert _comment_count(db_session) == 1

    def test_store_failure_on_post_lookup_is_internal(self, setup, monkeypatch, caplog):
        authoring = setup["authoring"]

        def broken_lookup(post_id):
            raise InternalError()

        monkeypatch.setattr(authoring.posts, "get_post", broken_lookup)
        with caplog.at_level(logging.INFO, logger="threadline.services.comment_authoring"):
            with pytest.raises(InternalError):
                authoring.create_root_comment(setup["post"].id, "hello", setup["author"].id)
        assert "帖子不存在" not in caplog.text
