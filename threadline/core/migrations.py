"""
数据库迁移管理器

提供统一的迁移管理，支持：
1. 自动检测并补齐缺失的索引
2. 记录已执行的迁移（避免重复执行）
3. 支持 MySQL 和 SQLite 两种数据库
"""

import logging
import uuid
from datetime import datetime
from typing import Callable

from sqlalchemy import Column, DateTime, String, Text, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from threadline.core.database import Base

logger = logging.getLogger(__name__)


class MigrationHistory(Base):
    """迁移历史记录表"""
    __tablename__ = "migration_history"

    id = Column(String(191), primary_key=True)
    name = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    executed_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class MigrationManager:
    """迁移管理器"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._migrations: list[tuple[str, str, Callable[["MigrationManager"], None]]] = []

    def register(self, name: str, description: str = ""):
        """注册迁移的装饰器"""
        def decorator(func: Callable[["MigrationManager"], None]):
            self._migrations.append((name, description, func))
            return func
        return decorator

    def _ensure_history_table(self):
        MigrationHistory.__table__.create(bind=self.engine, checkfirst=True)

    def is_executed(self, name: str) -> bool:
        """检查迁移是否已执行"""
        with self.engine.connect() as conn:
            result = conn.execute(
                text("SELECT 1 FROM migration_history WHERE name = :name"),
                {"name": name}
            )
            return result.fetchone() is not None

    def _mark_executed(self, name: str, description: str):
        with self.engine.begin() as conn:
            conn.execute(
                text("""
                    INSERT INTO migration_history (id, name, description, executed_at)
                    VALUES (:id, :name, :description, :executed_at)
                """),
                {
                    "id": str(uuid.uuid4()),
                    "name": name,
                    "description": description,
                    "executed_at": datetime.utcnow()
                }
            )

    def table_exists(self, table_name: str) -> bool:
        """检查表是否存在"""
        inspector = inspect(self.engine)
        return table_name in inspector.get_table_names()

    def index_exists(self, table_name: str, index_name: str) -> bool:
        """检查索引是否存在"""
        if not self.table_exists(table_name):
            return False
        inspector = inspect(self.engine)
        indexes = {idx["name"] for idx in inspector.get_indexes(table_name)}
        return index_name in indexes

    def execute(self, sql: str):
        """执行 SQL"""
        with self.engine.begin() as conn:
            conn.execute(text(sql))

    def add_index(self, table: str, index_name: str, columns: list[str]):
        """添加索引（如果不存在）"""
        if self.index_exists(table, index_name):
            return
        cols = ", ".join(columns)
        self.execute(f"CREATE INDEX {index_name} ON {table} ({cols})")
        logger.info("已添加索引: %s ON %s", index_name, table)

    def run_all(self) -> list[str]:
        """运行所有未执行的迁移，返回本次执行的迁移名"""
        self._ensure_history_table()

        executed: list[str] = []
        for name, description, func in self._migrations:
            if self.is_executed(name):
                continue
            try:
                logger.info("执行迁移: %s", name)
                func(self)
                self._mark_executed(name, description)
                logger.info("迁移完成: %s", name)
            except SQLAlchemyError as e:
                logger.error("迁移失败 [%s]: %s", name, e)
                raise
            executed.append(name)
        return executed
