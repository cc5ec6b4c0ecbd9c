from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional


class CommentCreate(BaseModel):
    text: str


class CommentResponse(BaseModel):
    id: int
    text: str
    postId: int
    authorId: str
    parentCommentId: Optional[int] = None
    createdAt: datetime

    model_config = ConfigDict(from_attributes=True)


class DisplayComment(CommentResponse):
    """展示用评论：自身字段 + 最新的少量直接回复 + 直接回复总数（不落库）"""
    replies: list[CommentResponse] = []
    totalReplies: int = 0


class CommentListResponse(BaseModel):
    comments: list[DisplayComment]


class CommentPage(BaseModel):
    comments: list[DisplayComment]
    total: int
    page: int
    pageSize: int
    hasMore: bool
