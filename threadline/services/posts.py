import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from threadline.core.errors import InternalError, NotFoundError
from threadline.models import Post

logger = logging.getLogger(__name__)


class PostService:
    """帖子服务：评论组件通过它确认帖子存在"""

    def __init__(self, db: Session):
        self.db = db

    def get_post(self, post_id: int) -> Post:
        try:
            post = self.db.get(Post, post_id)
        except SQLAlchemyError as exc:
            logger.exception("查询帖子失败: postId=%s", post_id)
            raise InternalError() from exc
        if post is None:
            raise NotFoundError("帖子不存在")
        return post

    def create_post(self, author_id: str, title: str, content: str) -> Post:
        post = Post(authorId=author_id, title=title, content=content)
        self.db.add(post)
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("创建帖子失败: authorId=%s", author_id)
            raise InternalError() from exc
        logger.info("帖子已创建: postId=%s authorId=%s", post.id, author_id)
        return post
