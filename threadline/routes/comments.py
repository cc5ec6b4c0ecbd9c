from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from threadline.core.config import settings
from threadline.core.database import get_db
from threadline.core.rate_limit import enforce_comment_rate_limit
from threadline.models import User
from threadline.schemas.comment import (
    CommentCreate,
    CommentListResponse,
    CommentPage,
    CommentResponse,
)
from threadline.services.comment_authoring import CommentAuthoring
from threadline.services.comment_retrieval import CommentRetrieval

router = APIRouter()


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(enforce_comment_rate_limit),
):
    """发表顶层评论"""
    return CommentAuthoring(db).create_root_comment(post_id, data.text, current_user.id)


@router.post(
    "/{post_id}/comments/{comment_id}/reply",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reply_to_comment(
    post_id: int,
    comment_id: int,
    data: CommentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(enforce_comment_rate_limit),
):
    """回复评论（任意层级）"""
    return CommentAuthoring(db).create_reply(comment_id, data.text, current_user.id, post_id)


@router.get("/{post_id}/comments", response_model=CommentListResponse)
async def get_comments_for_post(
    post_id: int,
    sortBy: str = Query("createdAt"),
    sortOrder: str = Query("desc"),
    db: Session = Depends(get_db),
):
    """顶层评论列表，每条附带最新回复预览"""
    comments = CommentRetrieval(db).list_top_level(post_id, sortBy, sortOrder)
    return CommentListResponse(comments=comments)


@router.get("/{post_id}/comments/{comment_id}/expand", response_model=CommentPage)
async def expand_comment(
    post_id: int,
    comment_id: int,
    page: int = Query(1),
    pageSize: int = Query(settings.COMMENT_DEFAULT_PAGE_SIZE),
    db: Session = Depends(get_db),
):
    """分页展开某条评论的直接回复"""
    retrieval = CommentRetrieval(db)
    page, pageSize = retrieval.normalize_paging(page, pageSize)
    comments, total = retrieval.expand_children(post_id, comment_id, page, pageSize)
    return CommentPage(
        comments=comments,
        total=total,
        page=page,
        pageSize=pageSize,
        hasMore=page * pageSize < total,
    )
