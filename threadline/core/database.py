from contextlib import contextmanager
from typing import Generator, Iterator

from fastapi import Depends, Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.engine.url import make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

Base = declarative_base()


def _engine_kwargs(url) -> dict:
    kwargs: dict = {"echo": False, "pool_pre_ping": True}
    if url.drivername.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(
            {
                "pool_size": 10,
                "max_overflow": 20,
                "connect_args": {"connect_timeout": 5},
            }
        )
        if url.drivername.startswith("mysql"):
            kwargs["connect_args"]["charset"] = "utf8mb4"
    return kwargs


def _configure_sqlite_connection(dbapi_connection, connection_record):  # noqa: ARG001
    # pysqlite 默认在 SELECT 前不发 BEGIN，多条读语句各自 autocommit；
    # 关掉驱动自己的事务管理，由下面的 begin 事件显式开启事务
    dbapi_connection.isolation_level = None
    # SQLite 默认不校验外键，parentCommentId/postId 的引用完整性依赖它
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _emit_sqlite_begin(conn):
    conn.exec_driver_sql("BEGIN")


def install_sqlite_pragmas(engine: Engine) -> None:
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _configure_sqlite_connection)
        event.listen(engine, "begin", _emit_sqlite_begin)


class Database:
    """数据库句柄：进程启动时创建，关闭时释放"""

    def __init__(self, url: str, **engine_overrides):
        self.url = make_url(url)
        kwargs = _engine_kwargs(self.url)
        kwargs.update(engine_overrides)
        self.engine = create_engine(self.url, **kwargs)
        install_sqlite_pragmas(self.engine)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def dispose(self) -> None:
        self.engine.dispose()


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(database: Database = Depends(get_database)) -> Generator[Session, None, None]:
    """数据库会话依赖注入"""
    db = database.session()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    # SQLAlchemy 2.x 默认 autobegin：只要 query 过就已经在事务中。
    # 已在事务中时用 SAVEPOINT，保证块内的多条语句看到同一份提交状态。
    if db.in_transaction():
        with db.begin_nested():
            yield db
    else:
        with db.begin():
            yield db
