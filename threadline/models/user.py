from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship
from threadline.core.database import Base
import uuid
from datetime import datetime


class User(Base):
    """用户：邮箱唯一，作为登录凭据"""
    __tablename__ = "user"

    id = Column(String(191), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(100), nullable=False)
    email = Column(String(191), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)
    createdAt = Column(DateTime, default=datetime.utcnow, nullable=False)
    updatedAt = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    posts = relationship("Post", back_populates="author", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User {self.email}>"
