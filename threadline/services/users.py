"""
用户注册与登录
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from threadline.core.errors import ConflictError, InternalError, NotFoundError, UnauthorizedError
from threadline.core.security import get_password_hash, verify_password
from threadline.models import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db

    def _find_by_email(self, email: str):
        try:
            return self.db.execute(select(User).where(User.email == email)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.exception("查询用户失败: email=%s", email)
            raise InternalError() from exc

    def register(self, name: str, email: str, password: str) -> User:
        """注册新用户；邮箱已被占用时抛出 ConflictError"""
        if self._find_by_email(email) is not None:
            self.db.rollback()
            raise ConflictError("该邮箱已注册")

        user = User(name=name, email=email, password=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            # 并发注册同一邮箱时由唯一索引兜底
            self.db.rollback()
            raise ConflictError("该邮箱已注册") from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("注册失败: email=%s", email)
            raise InternalError() from exc

        logger.info("新用户注册: userId=%s", user.id)
        return user

    def authenticate(self, email: str, password: str) -> User:
        user = self._find_by_email(email)
        if user is None:
            logger.info("登录失败，用户不存在: email=%s", email)
            raise NotFoundError("用户不存在")
        if not verify_password(password, user.password):
            logger.info("登录失败，密码错误: userId=%s", user.id)
            raise UnauthorizedError("密码错误")
        return user
