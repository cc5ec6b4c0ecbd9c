"""
数据库迁移定义

所有迁移按顺序定义，迁移管理器会自动跳过已执行的迁移。
新库由 create_all 直接建出索引，这里只负责补齐旧库。
"""

from sqlalchemy.engine import Engine

from threadline.core.migrations import MigrationManager


def build_migration_manager(engine: Engine) -> MigrationManager:
    manager = MigrationManager(engine)

    @manager.register("001_comment_thread_index", "comment 表 (postId, parentCommentId) 复合索引")
    def migrate_comment_thread_index(m: MigrationManager):
        if not m.table_exists("comment"):
            return
        m.add_index("comment", "idx_comment_post_parent", ["postId", "parentCommentId"])

    @manager.register("002_comment_listing_index", "comment 表 (postId, createdAt) 复合索引")
    def migrate_comment_listing_index(m: MigrationManager):
        if not m.table_exists("comment"):
            return
        m.add_index("comment", "idx_comment_post_created", ["postId", "createdAt"])

    return manager


def run_migrations(engine: Engine) -> list[str]:
    """运行所有迁移"""
    return build_migration_manager(engine).run_all()
