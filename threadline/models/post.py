from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from threadline.core.database import Base
from datetime import datetime, timezone


def utc_now():
    """返回带时区的 UTC 时间"""
    return datetime.now(timezone.utc)


class Post(Base):
    """帖子"""
    __tablename__ = "post"

    id = Column(Integer, primary_key=True, autoincrement=True)
    authorId = Column(String(191), ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    createdAt = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # 关系
    author = relationship("User", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Post {self.title}>"
