"""
评论限流（Redis 固定窗口）

每个用户在一个窗口内最多发表 max_requests 条评论/回复。
限流在鉴权之后、评论逻辑之前执行，被拒绝的请求不会产生任何写入。
"""
import logging
from typing import Optional

import redis
from fastapi import Depends, Request

from threadline.core.config import settings
from threadline.core.errors import RateLimitedError
from threadline.core.security import get_current_user
from threadline.models import User

logger = logging.getLogger(__name__)


class CommentRateLimiter:
    """评论限流器；redis_client 为空时不限流"""

    KEY_PREFIX = "comments:rate"

    def __init__(self, redis_client: Optional["redis.Redis"], max_requests: int, window_seconds: int):
        self.redis = redis_client
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    @classmethod
    def from_settings(cls) -> "CommentRateLimiter":
        client = None
        if settings.REDIS_URL:
            client = redis.Redis.from_url(
                settings.REDIS_URL,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
        return cls(
            client,
            max_requests=settings.COMMENT_RATE_LIMIT_MAX,
            window_seconds=settings.COMMENT_RATE_LIMIT_WINDOW_SECONDS,
        )

    def _key(self, user_id: str) -> str:
        return f"{self.KEY_PREFIX}:{user_id}"

    def hit(self, user_id: str) -> int:
        """记录一次评论请求，超限抛出 RateLimitedError；返回窗口内的计数"""
        if self.redis is None:
            return 0

        key = self._key(user_id)
        try:
            # INCR 与 EXPIRE 在同一个 MULTI 中提交；NX 只在 key 没有 TTL 时设置，
            # 窗口不会被后续请求顺延，也不会留下永不过期的计数
            pipe = self.redis.pipeline(transaction=True)
            pipe.incr(key)
            pipe.expire(key, self.window_seconds, nx=True)
            count = int(pipe.execute()[0])
        except redis.RedisError as exc:
            # 限流服务不可用时放行，不影响正常评论
            logger.warning("评论限流检查失败，已放行: userId=%s err=%s", user_id, exc)
            return 0

        if count > self.max_requests:
            logger.info("评论请求被限流: userId=%s count=%s", user_id, count)
            minutes = max(1, self.window_seconds // 60)
            raise RateLimitedError(f"评论过于频繁，请 {minutes} 分钟后再试")
        return count

    def close(self) -> None:
        if self.redis is not None:
            self.redis.close()


def get_rate_limiter(request: Request) -> CommentRateLimiter:
    return request.app.state.rate_limiter


async def enforce_comment_rate_limit(
    current_user: User = Depends(get_current_user),
    limiter: CommentRateLimiter = Depends(get_rate_limiter),
) -> User:
    """鉴权 + 限流，返回当前用户"""
    limiter.hit(current_user.id)
    return current_user
