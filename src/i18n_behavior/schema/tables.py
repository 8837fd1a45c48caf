# src/i18n_behavior/schema/tables.py
"""
把构建期的 TableSpec 物化为 SQLAlchemy Core `Table`。

生成的 `Table` 对象是代码生成与仓库层共同使用的产物：
- 翻译表以 (所属键, 语言) 为复合主键；
- 外键带命名及 ON DELETE / ON UPDATE 引用动作；
- 语言列带服务端默认值（默认语言）。
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKeyConstraint,
    Integer,
    LargeBinary,
    MetaData,
    Numeric,
    SmallInteger,
    String,
    Table,
    Text,
    Time,
)
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.schema import CreateTable
from sqlalchemy.types import TypeEngine

from ..exceptions import ConfigError
from .types import ColumnSpec, DatabaseSpec, I18nSplit, TableSpec


def _column_type(column: ColumnSpec) -> TypeEngine:
    kind = column.type
    if kind == "INTEGER":
        return Integer()
    if kind == "BIGINT":
        return BigInteger()
    if kind in ("SMALLINT", "TINYINT"):
        return SmallInteger()
    if kind in ("VARCHAR", "CHAR"):
        return String(column.size or 255)
    if kind in ("LONGVARCHAR", "CLOB", "TEXT"):
        return Text()
    if kind == "BOOLEAN":
        return Boolean()
    if kind in ("FLOAT", "DOUBLE", "REAL"):
        return Float()
    if kind in ("DECIMAL", "NUMERIC"):
        return Numeric()
    if kind == "DATE":
        return Date()
    if kind == "TIME":
        return Time()
    if kind == "TIMESTAMP":
        return DateTime()
    if kind == "BLOB":
        return LargeBinary()
    raise ConfigError(f"列 {column.name!r} 的类型 {kind!r} 无法映射")


def _column(column: ColumnSpec) -> Column:
    kwargs = {}
    if column.primary_key:
        kwargs["autoincrement"] = column.autoincrement
    if column.default is not None:
        kwargs["default"] = column.default
        if isinstance(column.default, str):
            kwargs["server_default"] = column.default
    return Column(
        column.name,
        _column_type(column),
        primary_key=column.primary_key,
        nullable=not (column.required or column.primary_key),
        **kwargs,
    )


def _is_rowid_key(spec: TableSpec) -> bool:
    pk = [c for c in spec.columns if c.primary_key]
    return len(pk) == 1 and pk[0].autoincrement and pk[0].type == "INTEGER"


def build_table(spec: TableSpec, metadata: MetaData) -> Table:
    """在 metadata 中创建（或复用已存在的）同名表。"""
    existing = metadata.tables.get(spec.name)
    if existing is not None:
        return existing

    constraints = [
        ForeignKeyConstraint(
            list(fk.local_columns),
            [f"{fk.foreign_table}.{name}" for name in fk.foreign_columns],
            name=fk.name,
            ondelete=fk.on_delete,
            onupdate=fk.on_update,
        )
        for fk in spec.foreign_keys
    ]
    kwargs = {}
    if _is_rowid_key(spec):
        # SQLite 默认会复用已删除行的 rowid
        kwargs["sqlite_autoincrement"] = True
    return Table(
        spec.name,
        metadata,
        *(_column(c) for c in spec.columns),
        *constraints,
        **kwargs,
    )


@dataclass(frozen=True)
class I18nTables:
    """一次拆分对应的两张 SQLAlchemy 表。"""

    split: I18nSplit
    base: Table
    translation: Table

    def owner_clause(self, key: tuple, table: Table | None = None):
        """翻译表所属键列等于给定主键值的条件列表。"""
        target = self.translation if table is None else table
        return [target.c[name] == value for name, value in zip(self.split.owner_columns, key)]

    def key_clause(self, key: tuple):
        return [self.base.c[name] == value for name, value in zip(self.split.key_columns, key)]


def build_tables(split: I18nSplit, metadata: MetaData) -> I18nTables:
    base = build_table(split.base, metadata)
    translation = build_table(split.translation, metadata)
    return I18nTables(split=split, base=base, translation=translation)


def build_database_tables(
    database: DatabaseSpec, splits: Mapping[str, I18nSplit], metadata: MetaData
) -> dict[str, Table]:
    """
    物化整个 schema。拆分过的表以基础表形式出现，其翻译表紧随其后；
    被拆分结果接管的既有翻译表不再单独生成。
    """
    replaced = {split.translation.name for split in splits.values()}
    tables: dict[str, Table] = {}
    for spec in database.tables:
        if spec.name in replaced:
            continue
        split = splits.get(spec.name)
        if split is None:
            tables[spec.name] = build_table(spec, metadata)
            continue
        built = build_tables(split, metadata)
        tables[split.base.name] = built.base
        tables[split.translation.name] = built.translation
    return tables


_DIALECTS = {
    "sqlite": sqlite.dialect,
    "postgresql": postgresql.dialect,
}


def render_ddl(
    metadata: MetaData, dialect: Literal["sqlite", "postgresql"] = "sqlite"
) -> list[str]:
    """按依赖顺序渲染 CREATE TABLE 语句。"""
    try:
        target = _DIALECTS[dialect]()
    except KeyError as e:
        raise ConfigError(f"不支持的 SQL 方言: {dialect!r}") from e
    return [
        str(CreateTable(table).compile(dialect=target)).strip()
        for table in metadata.sorted_tables
    ]
