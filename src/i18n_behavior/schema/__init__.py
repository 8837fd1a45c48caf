# src/i18n_behavior/schema/__init__.py
"""
构建期 schema 层：表定义类型、拆分器、SQLAlchemy 表物化与方法签名生成。
本层不做任何 I/O。
"""

from .signatures import MethodSignature, generated_methods
from .splitter import SchemaSplitter, split_table
from .tables import (
    I18nTables,
    build_database_tables,
    build_table,
    build_tables,
    render_ddl,
)
from .types import (
    ColumnSpec,
    DatabaseSpec,
    ForeignKeySpec,
    I18nSplit,
    TableSpec,
)

__all__ = [
    "ColumnSpec",
    "DatabaseSpec",
    "ForeignKeySpec",
    "I18nSplit",
    "I18nTables",
    "MethodSignature",
    "SchemaSplitter",
    "TableSpec",
    "build_database_tables",
    "build_table",
    "build_tables",
    "generated_methods",
    "render_ddl",
    "split_table",
]
