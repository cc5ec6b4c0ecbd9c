from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from threadline.core.database import Base
from threadline.models.post import utc_now


class Comment(Base):
    """帖子评论（楼中楼：parentCommentId 为空即顶层评论）"""
    __tablename__ = "comment"
    __table_args__ = (
        # 顶层列表与子评论展开都是该索引上的单次扫描
        Index("idx_comment_post_parent", "postId", "parentCommentId"),
        Index("idx_comment_post_created", "postId", "createdAt"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    # 回复沿用父评论的 postId，创建后不可修改
    postId = Column(Integer, ForeignKey("post.id", ondelete="CASCADE"), nullable=False)
    authorId = Column(String(191), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    parentCommentId = Column(Integer, ForeignKey("comment.id", ondelete="CASCADE"), nullable=True)
    createdAt = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # 关系
    post = relationship("Post", back_populates="comments")
    author = relationship("User")

    def __repr__(self):
        return f"<Comment {self.id} post={self.postId} parent={self.parentCommentId}>"
