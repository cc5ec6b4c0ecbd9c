"""
评论展示整形

DisplayComment = 评论自身字段 + 最新的 N 条直接回复（不再嵌套预览）+ 直接回复总数。
每层都用同一条规则，响应体大小与子树规模无关；更深的内容由客户端逐层展开。
"""
from typing import Sequence

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from threadline.models import Comment
from threadline.schemas.comment import CommentResponse, DisplayComment

# 子评论统一按“最新在前”排列，同一时刻创建的按 id 倒序
NEWEST_FIRST = (Comment.createdAt.desc(), Comment.id.desc())


def load_reply_previews(
    db: Session,
    post_id: int,
    parent_ids: Sequence[int],
    limit: int,
) -> dict[int, list[Comment]]:
    """批量取每个父评论最新的 limit 条直接回复"""
    if not parent_ids or limit <= 0:
        return {}

    rank = func.row_number().over(
        partition_by=Comment.parentCommentId,
        order_by=NEWEST_FIRST,
    ).label("rank")
    ranked = (
        select(Comment.id.label("id"), rank)
        .where(Comment.postId == post_id, Comment.parentCommentId.in_(parent_ids))
        .subquery()
    )
    stmt = (
        select(Comment)
        .join(ranked, ranked.c.id == Comment.id)
        .where(ranked.c.rank <= limit)
        .order_by(Comment.parentCommentId, *NEWEST_FIRST)
    )

    previews: dict[int, list[Comment]] = {}
    for reply in db.execute(stmt).scalars():
        previews.setdefault(reply.parentCommentId, []).append(reply)
    return previews


def count_direct_replies(db: Session, post_id: int, parent_ids: Sequence[int]) -> dict[int, int]:
    """批量统计直接回复数（不递归统计后代）"""
    if not parent_ids:
        return {}

    stmt = (
        select(Comment.parentCommentId, func.count(Comment.id))
        .where(Comment.postId == post_id, Comment.parentCommentId.in_(parent_ids))
        .group_by(Comment.parentCommentId)
    )
    return {parent_id: count for parent_id, count in db.execute(stmt)}


def shape_comments(
    db: Session,
    post_id: int,
    comments: Sequence[Comment],
    preview_size: int,
) -> list[DisplayComment]:
    parent_ids = [c.id for c in comments]
    previews = load_reply_previews(db, post_id, parent_ids, preview_size)
    counts = count_direct_replies(db, post_id, parent_ids)

    shaped = []
    for comment in comments:
        base = CommentResponse.model_validate(comment)
        shaped.append(
            DisplayComment(
                **base.model_dump(),
                replies=[CommentResponse.model_validate(r) for r in previews.get(comment.id, [])],
                totalReplies=counts.get(comment.id, 0),
            )
        )
    return shaped
