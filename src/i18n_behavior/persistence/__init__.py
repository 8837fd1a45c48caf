# src/i18n_behavior/persistence/__init__.py
"""
持久化公共 API。

仅从本包导入公共函数与仓库类，不直接引用内部模块路径。
"""

from .interfaces import TranslationLoader
from .repository import SqlAlchemyTranslatableRepository
from .session import create_db_engine, create_sessionmaker, session_scope

__all__ = [
    "SqlAlchemyTranslatableRepository",
    "TranslationLoader",
    "create_db_engine",
    "create_sessionmaker",
    "session_scope",
]
