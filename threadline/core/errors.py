"""
评论系统错误分类

核心逻辑只负责选出正确的错误类型；HTTP 状态码和响应体在边界统一生成。
"""
from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ThreadlineError(Exception):
    """基础错误"""

    code = "error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "服务器内部错误"
    # 调用方是否可以原样重试
    retryable = False

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(ThreadlineError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "资源不存在"


class InvalidInputError(ThreadlineError):
    code = "invalid_input"
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "请求参数无效"


class UnauthorizedError(ThreadlineError):
    code = "unauthorized"
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "无效的认证凭证"


class RateLimitedError(ThreadlineError):
    code = "rate_limited"
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    default_message = "评论过于频繁，请稍后再试"
    retryable = True


class ConflictError(ThreadlineError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT
    default_message = "数据已被修改，请刷新后重试"


class InternalError(ThreadlineError):
    code = "internal_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "服务器内部错误"
    retryable = True


def error_response(exc: ThreadlineError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "code": exc.code, "retryable": exc.retryable},
        headers=headers,
    )


async def threadline_error_handler(request: Request, exc: ThreadlineError):  # noqa: ARG001
    return error_response(exc)
