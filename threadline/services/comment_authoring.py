"""
评论写入：顶层评论与任意深度的回复共用同一个插入流程
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from threadline.core.config import settings
from threadline.core.errors import (
    InternalError,
    InvalidInputError,
    NotFoundError,
)
from threadline.models import Comment
from threadline.services.posts import PostService

logger = logging.getLogger(__name__)


class CommentAuthoring:
    def __init__(self, db: Session, max_length: Optional[int] = None):
        self.db = db
        self.posts = PostService(db)
        self.max_length = max_length or settings.COMMENT_MAX_LENGTH

    def _clean_text(self, text: Optional[str]) -> str:
        text = (text or "").strip()
        if not text:
            raise InvalidInputError("评论内容不能为空")
        if len(text) > self.max_length:
            raise InvalidInputError(f"评论内容不能超过 {self.max_length} 个字符")
        return text

    def create_root_comment(self, post_id: int, text: str, author_id: str) -> Comment:
        """在帖子下发表顶层评论"""
        text = self._clean_text(text)
        try:
            self.posts.get_post(post_id)
        except NotFoundError:
            self.db.rollback()
            logger.info("评论失败，帖子不存在: postId=%s authorId=%s", post_id, author_id)
            raise
        comment = Comment(text=text, postId=post_id, authorId=author_id, parentCommentId=None)
        return self._insert(comment)

    def create_reply(
        self,
        parent_comment_id: int,
        text: str,
        author_id: str,
        post_id: int,
    ) -> Comment:
        """回复任意一条评论；postId 必须与父评论一致"""
        text = self._clean_text(text)
        try:
            parent = self.db.get(Comment, parent_comment_id)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("查询父评论失败: commentId=%s", parent_comment_id)
            raise InternalError() from exc

        if parent is None or parent.postId != post_id:
            self.db.rollback()
            logger.info(
                "回复失败，父评论不存在或不属于该帖子: commentId=%s postId=%s",
                parent_comment_id,
                post_id,
            )
            raise NotFoundError("评论不存在")

        reply = Comment(
            text=text,
            postId=parent.postId,
            authorId=author_id,
            parentCommentId=parent.id,
        )
        return self._insert(reply)

    def _insert(self, comment: Comment) -> Comment:
        # 存在性检查与插入在同一事务内提交；并发删除导致的外键失败按“不存在”处理
        self.db.add(comment)
        try:
            self.db.flush()
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.info(
                "评论写入违反约束: postId=%s parentCommentId=%s err=%s",
                comment.postId,
                comment.parentCommentId,
                exc.orig,
            )
            raise NotFoundError("帖子或父评论已不存在") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("评论写入失败: postId=%s", comment.postId)
            raise InternalError() from exc

        logger.info(
            "评论已创建: commentId=%s postId=%s parentCommentId=%s",
            comment.id,
            comment.postId,
            comment.parentCommentId,
        )
        return comment
