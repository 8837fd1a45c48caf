# src/i18n_behavior/persistence/session.py
"""
引擎与会话工厂（同步）

- create_db_engine(settings)：按配置创建 Engine；内存 SQLite 使用 StaticPool，
  保证所有会话看到同一个库；
  SQLite 连接一律开启外键约束（PRAGMA foreign_keys = ON）；
- create_sessionmaker(engine)：标准化创建 Session 工厂；
- session_scope(sessionmaker)：统一事务域（自动提交/回滚/关闭）。
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

if TYPE_CHECKING:
    from ..config import I18nSettings


def _is_memory_sqlite(url: str) -> bool:
    parsed = make_url(url)
    return parsed.get_backend_name() == "sqlite" and parsed.database in (None, "", ":memory:")


def _enable_sqlite_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys = ON")
    finally:
        cursor.close()


def create_db_engine(settings: "I18nSettings") -> Engine:
    """创建同步 Engine。"""
    url = settings.database.url
    kwargs: dict[str, Any] = {"echo": settings.database.echo}
    if _is_memory_sqlite(url):
        kwargs["poolclass"] = StaticPool
        kwargs["connect_args"] = {"check_same_thread": False}
    engine = create_engine(url, **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def create_sessionmaker(engine: Engine) -> sessionmaker[Session]:
    """基于引擎创建 Session 工厂。"""
    return sessionmaker(bind=engine, expire_on_commit=False, autoflush=False)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """标准化事务作用域：自动提交/回滚与资源释放。"""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
