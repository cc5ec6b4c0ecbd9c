"""
评论树读取

1. 顶层列表：帖子下 parentCommentId 为空的评论，每条附带最新回复预览与直接回复数
2. 展开：分页读取某条评论的直接子评论，子评论同样附带预览与回复数
"""
import logging
from enum import Enum
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from threadline.core.config import settings
from threadline.core.database import transaction
from threadline.core.errors import InternalError, InvalidInputError, NotFoundError
from threadline.models import Comment
from threadline.schemas.comment import DisplayComment
from threadline.services.comment_shaping import NEWEST_FIRST, shape_comments
from threadline.services.posts import PostService

logger = logging.getLogger(__name__)


class CommentSortField(str, Enum):
    CREATED_AT = "createdAt"
    ID = "id"
    TOTAL_REPLIES = "totalReplies"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


def _reply_count_expression():
    reply = aliased(Comment)
    return (
        select(func.count(reply.id))
        .where(reply.parentCommentId == Comment.id)
        .correlate(Comment)
        .scalar_subquery()
    )


# 允许排序的字段 -> 列表达式；客户端传入的字段名不会直接进入查询
SORT_COLUMNS = {
    CommentSortField.CREATED_AT: lambda: Comment.createdAt,
    CommentSortField.ID: lambda: Comment.id,
    CommentSortField.TOTAL_REPLIES: _reply_count_expression,
}


def parse_sort(sort_field: Optional[str], sort_order: Optional[str]) -> tuple[CommentSortField, SortOrder]:
    try:
        field = CommentSortField(sort_field or CommentSortField.CREATED_AT.value)
    except ValueError:
        allowed = ", ".join(f.value for f in CommentSortField)
        raise InvalidInputError(f"不支持的排序字段: {sort_field}（可选 {allowed}）") from None
    try:
        order = SortOrder((sort_order or SortOrder.DESC.value).lower())
    except ValueError:
        raise InvalidInputError("排序方向只支持 asc / desc") from None
    return field, order


class CommentRetrieval:
    def __init__(
        self,
        db: Session,
        preview_size: Optional[int] = None,
        max_page_size: Optional[int] = None,
    ):
        self.db = db
        self.posts = PostService(db)
        self.preview_size = settings.COMMENT_PREVIEW_SIZE if preview_size is None else preview_size
        self.max_page_size = max_page_size or settings.COMMENT_MAX_PAGE_SIZE

    def list_top_level(
        self,
        post_id: int,
        sort_field: Optional[str] = None,
        sort_order: Optional[str] = None,
    ) -> list[DisplayComment]:
        """帖子的顶层评论列表；同值按 id 升序保证结果稳定"""
        field, order = parse_sort(sort_field, sort_order)
        column = SORT_COLUMNS[field]()
        order_by = column.asc() if order is SortOrder.ASC else column.desc()

        try:
            with transaction(self.db):
                self.posts.get_post(post_id)
                stmt = (
                    select(Comment)
                    .where(Comment.postId == post_id, Comment.parentCommentId.is_(None))
                    .order_by(order_by, Comment.id.asc())
                )
                roots = self.db.execute(stmt).scalars().all()
                return shape_comments(self.db, post_id, roots, self.preview_size)
        except SQLAlchemyError as exc:
            logger.exception("读取评论列表失败: postId=%s", post_id)
            raise InternalError() from exc

    def normalize_paging(self, page: int, page_size: int) -> tuple[int, int]:
        if page is None or page < 1:
            raise InvalidInputError("page 必须为正整数")
        if page_size is None or page_size < 1:
            raise InvalidInputError("pageSize 必须为正整数")
        return page, min(page_size, self.max_page_size)

    def expand_children(
        self,
        post_id: int,
        comment_id: int,
        page: int,
        page_size: int,
    ) -> tuple[list[DisplayComment], int]:
        """分页展开某条评论的直接子评论，返回 (本页评论, 子评论总数)"""
        page, page_size = self.normalize_paging(page, page_size)

        try:
            # 总数与本页在同一事务中读取，避免并发写入导致两者不一致
            with transaction(self.db):
                self.posts.get_post(post_id)
                parent = self.db.get(Comment, comment_id)
                if parent is None or parent.postId != post_id:
                    raise NotFoundError("评论不存在")

                where = (Comment.postId == post_id, Comment.parentCommentId == comment_id)
                total = self.db.execute(
                    select(func.count(Comment.id)).where(*where)
                ).scalar_one()
                children = self.db.execute(
                    select(Comment)
                    .where(*where)
                    .order_by(*NEWEST_FIRST)
                    .offset((page - 1) * page_size)
                    .limit(page_size)
                ).scalars().all()
                return shape_comments(self.db, post_id, children, self.preview_size), total
        except SQLAlchemyError as exc:
            logger.exception("展开子评论失败: postId=%s commentId=%s", post_id, comment_id)
            raise InternalError() from exc
