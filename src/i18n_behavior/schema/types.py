# src/i18n_behavior/schema/types.py
"""
本模块定义了构建期 schema 的数据类型。
这些类型是 Schema Splitter、表物化与代码生成之间交换数据的契约，
构造后不可变。
"""

from __future__ import annotations

import re
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import LocaleConfig

I18N_BEHAVIOR = "i18n"

SUPPORTED_TYPES = frozenset(
    {
        "INTEGER",
        "BIGINT",
        "SMALLINT",
        "TINYINT",
        "VARCHAR",
        "CHAR",
        "LONGVARCHAR",
        "CLOB",
        "TEXT",
        "BOOLEAN",
        "FLOAT",
        "DOUBLE",
        "REAL",
        "DECIMAL",
        "NUMERIC",
        "DATE",
        "TIME",
        "TIMESTAMP",
        "BLOB",
    }
)

_CAMEL_SPLIT = re.compile(r"[^0-9a-zA-Z]+")


def camelize(name: str) -> str:
    """book_author -> BookAuthor"""
    return "".join(part[:1].upper() + part[1:] for part in _CAMEL_SPLIT.split(name) if part)


class ColumnSpec(BaseModel):
    """一列的定义。"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    type: str = "VARCHAR"
    size: Optional[int] = Field(default=None, gt=0)
    primary_key: bool = False
    autoincrement: bool = False
    required: bool = False
    default: Any = None

    @field_validator("type")
    @classmethod
    def _normalize_type(cls, v: str) -> str:
        v = v.strip().upper()
        if v not in SUPPORTED_TYPES:
            raise ValueError(f"不支持的列类型: {v!r}")
        return v


class ForeignKeySpec(BaseModel):
    """外键定义；on_delete / on_update 为 SQL 引用动作，None 表示数据库默认。"""

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    foreign_table: str
    local_columns: tuple[str, ...]
    foreign_columns: tuple[str, ...]
    on_delete: Optional[str] = None
    on_update: Optional[str] = None


class TableSpec(BaseModel):
    """
    一张表的完整定义：列、主键（由列标记推导）、外键与行为参数。
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    columns: tuple[ColumnSpec, ...] = ()
    foreign_keys: tuple[ForeignKeySpec, ...] = ()
    behaviors: dict[str, dict[str, Any]] = Field(default_factory=dict)
    type_name: Optional[str] = None

    @field_validator("columns")
    @classmethod
    def _unique_columns(cls, v: tuple[ColumnSpec, ...]) -> tuple[ColumnSpec, ...]:
        seen: set[str] = set()
        for column in v:
            if column.name in seen:
                raise ValueError(f"重复的列名: {column.name!r}")
            seen.add(column.name)
        return v

    @property
    def primary_key(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns if c.primary_key)

    @property
    def column_names(self) -> tuple[str, ...]:
        return tuple(c.name for c in self.columns)

    @property
    def non_key_columns(self) -> tuple[ColumnSpec, ...]:
        return tuple(c for c in self.columns if not c.primary_key)

    @property
    def php_name(self) -> str:
        """生成的类型名，默认为表名的驼峰形式。"""
        return self.type_name or camelize(self.name)

    def has_column(self, name: str) -> bool:
        return any(c.name == name for c in self.columns)

    def get_column(self, name: str) -> ColumnSpec:
        for column in self.columns:
            if column.name == name:
                return column
        raise KeyError(name)

    def has_behavior(self, name: str) -> bool:
        return name in self.behaviors


class DatabaseSpec(BaseModel):
    """一组表定义，保持声明顺序。"""

    model_config = ConfigDict(frozen=True)

    name: str = "default"
    tables: tuple[TableSpec, ...] = ()

    def get_table(self, name: str) -> TableSpec | None:
        for table in self.tables:
            if table.name == name:
                return table
        return None

    def has_table(self, name: str) -> bool:
        return self.get_table(name) is not None


class I18nSplit(BaseModel):
    """
    Schema Splitter 的输出：基础表、翻译表以及连接二者的元数据。

    owner_columns 与 key_columns 按位置一一对应
    （翻译表的所属键列 -> 基础表的主键列）。
    """

    model_config = ConfigDict(frozen=True)

    source: TableSpec
    base: TableSpec
    translation: TableSpec
    config: LocaleConfig
    translatable_columns: tuple[str, ...]
    owner_columns: tuple[str, ...]
    key_columns: tuple[str, ...]
    foreign_key: ForeignKeySpec
    symfony_compat: bool = False

    @property
    def locale_column(self) -> str:
        return self.config.locale_column

    @property
    def default_locale(self) -> str:
        return self.config.default_locale

    @property
    def type_name(self) -> str:
        return self.base.php_name

    @property
    def translation_type_name(self) -> str:
        return self.translation.php_name

    @property
    def base_columns(self) -> tuple[str, ...]:
        return self.base.column_names

    def owner_key_map(self) -> dict[str, str]:
        """基础表主键列 -> 翻译表所属键列。"""
        return dict(zip(self.key_columns, self.owner_columns))

    def is_translatable(self, name: str) -> bool:
        return name in self.translatable_columns

    def merged_columns(self) -> tuple[ColumnSpec, ...]:
        """
        重新合成与原表等价的非主键列：基础表非主键列 + 翻译表中
        去掉所属键列与语言列后的列。
        """
        synthetic = {*self.owner_columns, self.locale_column}
        return (
            *self.base.non_key_columns,
            *(c for c in self.translation.columns if c.name not in synthetic),
        )
