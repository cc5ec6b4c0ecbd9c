import os
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError
from threadline.core.config import settings
from threadline.core.database import Database
from threadline.core.errors import (
    InvalidInputError,
    ThreadlineError,
    error_response,
    threadline_error_handler,
)
from threadline.core.migration_definitions import run_migrations
from threadline.core.rate_limit import CommentRateLimiter
from threadline.routes import auth, comments, health, posts

logger = logging.getLogger(__name__)


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def _run_startup(app: FastAPI) -> None:
    """应用启动时执行：打开数据库 + 创建表 + 运行迁移 + 初始化限流"""
    if getattr(app.state, "database", None) is None:
        app.state.database = Database(settings.DATABASE_URL)
    database: Database = app.state.database

    if settings.AUTO_CREATE_TABLES:
        try:
            database.create_all()
        except SQLAlchemyError as exc:
            logger.exception("数据库初始化失败（无法创建表），请检查 DATABASE_URL 连接与权限: %s", exc)

    if settings.AUTO_MIGRATE_SCHEMA:
        try:
            executed = run_migrations(database.engine)
        except SQLAlchemyError as exc:
            logger.exception("数据库自迁移失败: %s", exc)
            raise
        if executed:
            logger.info("已执行迁移: %s", ", ".join(executed))

    if getattr(app.state, "rate_limiter", None) is None:
        app.state.rate_limiter = CommentRateLimiter.from_settings()


def _run_shutdown(app: FastAPI) -> None:
    limiter = getattr(app.state, "rate_limiter", None)
    if limiter is not None:
        limiter.close()
    database = getattr(app.state, "database", None)
    if database is not None:
        database.dispose()
    logger.info("数据库连接已释放")


@asynccontextmanager
async def lifespan(app: FastAPI):
    _configure_logging()
    _run_startup(app)
    yield
    _run_shutdown(app)


# 创建 FastAPI 应用
app = FastAPI(
    title=settings.API_TITLE,
    version=settings.API_VERSION,
    description=settings.API_DESCRIPTION,
    docs_url="/docs",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

app.add_exception_handler(ThreadlineError, threadline_error_handler)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError):
    # 参数校验失败统一按 InvalidInputError 返回，响应体与业务错误一致
    errors = exc.errors()
    logger.info("请求参数校验失败: path=%s errors=%s", request.url.path, errors)
    message = "; ".join(
        f"{'.'.join(str(loc) for loc in err.get('loc', ()))}: {err.get('msg', '参数无效')}"
        for err in errors
    )
    return error_response(InvalidInputError(message or None))


@app.exception_handler(SQLAlchemyError)
async def _sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    # 统一把未归类的数据库异常转换成 JSON 响应
    logger.exception("数据库异常: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "数据库错误", "code": "internal_error", "retryable": True},
    )


# CORS 中间件
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_origin_regex=settings.CORS_ALLOW_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 健康检查
@app.get("/health")
async def health_check():
    """健康检查端点"""
    return {"status": "ok", "message": "Threadline Backend is running"}


# 包含路由
app.include_router(health.router, prefix="/api/health", tags=["Health"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
app.include_router(comments.router, prefix="/api/posts", tags=["Comments"])

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info"
    )
