from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional
from dotenv import load_dotenv
import os
import json


def _default_env_file() -> str:
    # 本地开发优先读取 SQLite 配置，避免依赖外部数据库
    for candidate in (".env.sqlite", ".env.sqlite.example", ".env"):
        if os.path.exists(candidate):
            return candidate
    return ".env"


ENV_FILE = os.getenv("ENV_FILE") or _default_env_file()
# HOST/PORT 等非 Settings 字段也从同一个文件读取
load_dotenv(ENV_FILE)


class Settings(BaseSettings):
    """应用配置"""

    # API 配置
    API_TITLE: str = "Threadline API"
    API_VERSION: str = "1.0.0"
    API_DESCRIPTION: str = "Threaded post discussions API"

    # JWT 配置
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 10080

    # 数据库配置
    DATABASE_URL: str
    AUTO_CREATE_TABLES: bool = True
    AUTO_MIGRATE_SCHEMA: bool = True

    # 日志级别
    LOG_LEVEL: str = "INFO"

    # 评论树展示
    # - COMMENT_PREVIEW_SIZE: 每条评论内联展示的最新回复数
    # - COMMENT_MAX_PAGE_SIZE: 展开子评论时单页上限，超出部分截断
    COMMENT_PREVIEW_SIZE: int = 2
    COMMENT_MAX_LENGTH: int = 2000
    COMMENT_DEFAULT_PAGE_SIZE: int = 10
    COMMENT_MAX_PAGE_SIZE: int = 50

    # 评论限流（未配置 REDIS_URL 时不限流）
    REDIS_URL: Optional[str] = None
    COMMENT_RATE_LIMIT_MAX: int = 10
    COMMENT_RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # CORS 配置
    # 支持通过环境变量 CORS_ORIGINS 覆盖：
    # - JSON 数组：["https://a.com","https://b.com"]
    # - 逗号分隔：https://a.com,https://b.com
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]
    CORS_ALLOW_ORIGIN_REGEX: Optional[str] = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            raw = v.strip()
            if not raw:
                return []
            if raw.startswith("["):
                try:
                    parsed = json.loads(raw)
                    if isinstance(parsed, list):
                        return [str(item).strip() for item in parsed if str(item).strip()]
                except ValueError:
                    pass
            return [item.strip() for item in raw.split(",") if item.strip()]
        return v

    @field_validator("CORS_ALLOW_ORIGIN_REGEX", "REDIS_URL", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        if isinstance(v, str):
            raw = v.strip()
            return raw or None
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        return v.strip().upper() or "INFO"

    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")


settings = Settings()
