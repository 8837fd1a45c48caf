# src/i18n_behavior/schema/splitter.py
"""
Schema Splitter：把一张带 i18n 行为的表拆成基础表与翻译表。

拆分是纯函数：相同输入总是得到相同的两张表，便于增量重新生成；
不做任何 I/O。两种模式：

1. 显式模式：行为参数 `i18n_columns` 列出可翻译列，它们从原表移入翻译表；
2. symfony 兼容模式：未列出可翻译列，但 schema 中已存在同名翻译表，
   此时该表中除所属键列与语言列之外的非主键列即为可翻译列，基础表保持不变。
"""

from __future__ import annotations

from typing import Any

import structlog

from ..config import LocaleConfig
from ..exceptions import ConfigError
from .types import (
    I18N_BEHAVIOR,
    ColumnSpec,
    DatabaseSpec,
    ForeignKeySpec,
    I18nSplit,
    TableSpec,
)

logger = structlog.get_logger(__name__)

# 外键引用动作：删除基础行时置空，更新主键时级联
ON_DELETE = "SET NULL"
ON_UPDATE = "CASCADE"

SYMFONY_LOCALE_COLUMN = "culture"


def _translation_table_name(table: TableSpec, config: LocaleConfig) -> str:
    return config.i18n_table or f"{table.name}_i18n"


def _owner_column_names(table: TableSpec, config: LocaleConfig) -> tuple[str, ...]:
    pk = table.primary_key
    if config.i18n_pk_column is None:
        return pk
    if len(pk) != 1:
        raise ConfigError(
            f"表 {table.name!r} 使用复合主键 {pk}，不能通过 i18n_pk_column 重命名所属键列"
        )
    return (config.i18n_pk_column,)


def _owner_columns(
    table: TableSpec, owner_names: tuple[str, ...], existing: TableSpec | None = None
) -> tuple[ColumnSpec, ...]:
    """翻译表的所属键列：复制基础表主键列，作为复合主键的第一部分。"""
    columns = []
    for key_name, owner_name in zip(table.primary_key, owner_names):
        if existing is not None and existing.has_column(owner_name):
            source = existing.get_column(owner_name)
        else:
            source = table.get_column(key_name)
        columns.append(
            source.model_copy(
                update={
                    "name": owner_name,
                    "primary_key": True,
                    "autoincrement": False,
                    "required": True,
                    "default": None,
                }
            )
        )
    return tuple(columns)


def _locale_column(config: LocaleConfig, existing: TableSpec | None = None) -> ColumnSpec:
    if existing is not None and existing.has_column(config.locale_column):
        return existing.get_column(config.locale_column).model_copy(
            update={"primary_key": True, "required": True}
        )
    return ColumnSpec(
        name=config.locale_column,
        type="VARCHAR",
        size=config.locale_length,
        primary_key=True,
        required=True,
        default=config.default_locale,
    )


def _select_translatable(table: TableSpec, names: tuple[str, ...]) -> tuple[ColumnSpec, ...]:
    if len(set(names)) != len(names):
        raise ConfigError(f"表 {table.name!r} 的 i18n_columns 中存在重复列: {names}")
    for name in names:
        if not table.has_column(name):
            raise ConfigError(f"表 {table.name!r} 中不存在可翻译列 {name!r}")
        if table.get_column(name).primary_key:
            raise ConfigError(f"主键列 {name!r} 不能声明为可翻译列")
    # 保持原表的列顺序
    return tuple(c for c in table.columns if c.name in names)


def _check_foreign_keys(table: TableSpec, translatable: set[str]) -> None:
    for fk in table.foreign_keys:
        moved = translatable.intersection(fk.local_columns)
        if moved:
            raise ConfigError(
                f"表 {table.name!r} 的外键列 {sorted(moved)} 不能声明为可翻译列"
            )


def _check_locale_collision(
    table: TableSpec, config: LocaleConfig, taken: tuple[str, ...]
) -> None:
    if config.locale_column in taken:
        raise ConfigError(
            f"语言列 {config.locale_column!r} 与表 {table.name!r} 的现有列冲突"
        )


def _check_partition(table: TableSpec, split: I18nSplit) -> None:
    original = {c.name for c in table.non_key_columns}
    base = {c.name for c in split.base.non_key_columns}
    moved = set(split.translatable_columns)
    if split.symfony_compat:
        if base & moved:
            raise ConfigError(
                f"表 {table.name!r} 与既有翻译表存在同名列: {sorted(base & moved)}"
            )
        return
    if base & moved or base | moved != original:
        raise ConfigError(f"表 {table.name!r} 的列拆分不是严格划分")


def _split_explicit(table: TableSpec, config: LocaleConfig) -> I18nSplit:
    translatable = _select_translatable(table, config.i18n_columns)
    names = {c.name for c in translatable}
    _check_foreign_keys(table, names)

    owner_names = _owner_column_names(table, config)
    if names.intersection(owner_names):
        raise ConfigError(f"所属键列 {owner_names} 与可翻译列重名")
    _check_locale_collision(table, config, (*table.column_names, *owner_names))
    translation_name = _translation_table_name(table, config)

    fk = ForeignKeySpec(
        name=f"fk_{translation_name}_{table.name}",
        foreign_table=table.name,
        local_columns=owner_names,
        foreign_columns=table.primary_key,
        on_delete=ON_DELETE,
        on_update=ON_UPDATE,
    )
    translation = TableSpec(
        name=translation_name,
        type_name=config.i18n_phpname or f"{table.php_name}I18n",
        columns=(
            *_owner_columns(table, owner_names),
            _locale_column(config),
            *translatable,
        ),
        foreign_keys=(fk,),
    )
    base = table.model_copy(
        update={"columns": tuple(c for c in table.columns if c.name not in names)}
    )
    return I18nSplit(
        source=table,
        base=base,
        translation=translation,
        config=config,
        translatable_columns=tuple(c.name for c in translatable),
        owner_columns=owner_names,
        key_columns=table.primary_key,
        foreign_key=fk,
    )


def _split_symfony_compat(
    table: TableSpec, config: LocaleConfig, existing: TableSpec, parameters: dict[str, Any]
) -> I18nSplit:
    if "locale_column" not in parameters and existing.has_column(SYMFONY_LOCALE_COLUMN):
        config = config.model_copy(
            update={
                "locale_column": SYMFONY_LOCALE_COLUMN,
                "locale_alias": config.locale_alias or SYMFONY_LOCALE_COLUMN,
            }
        )

    owner_names = _owner_column_names(table, config)
    _check_locale_collision(table, config, (*table.column_names, *owner_names))

    synthetic = {*owner_names, config.locale_column}
    translatable = tuple(
        c for c in existing.columns if not c.primary_key and c.name not in synthetic
    )
    if not translatable:
        raise ConfigError(f"既有翻译表 {existing.name!r} 中没有可翻译列")

    fk = next(
        (f for f in existing.foreign_keys if f.foreign_table == table.name),
        None,
    ) or ForeignKeySpec(
        name=f"fk_{existing.name}_{table.name}",
        foreign_table=table.name,
        local_columns=owner_names,
        foreign_columns=table.primary_key,
        on_delete=ON_DELETE,
        on_update=ON_UPDATE,
    )
    translation = existing.model_copy(
        update={
            "type_name": config.i18n_phpname or existing.type_name or f"{table.php_name}I18n",
            "columns": (
                *_owner_columns(table, owner_names, existing),
                _locale_column(config, existing),
                *translatable,
            ),
            "foreign_keys": (fk,),
        }
    )
    return I18nSplit(
        source=table,
        base=table,
        translation=translation,
        config=config,
        translatable_columns=tuple(c.name for c in translatable),
        owner_columns=owner_names,
        key_columns=table.primary_key,
        foreign_key=fk,
        symfony_compat=True,
    )


def split_table(
    table: TableSpec,
    *,
    database: DatabaseSpec | None = None,
    default_locale: str | None = None,
) -> I18nSplit:
    """
    拆分一张带 i18n 行为的表。

    Args:
        table: 声明了 `i18n` 行为的表定义。
        database: 完整的 schema，用于探测既有翻译表（symfony 兼容模式）。
        default_locale: 行为参数未声明默认语言时使用的进程级默认值。

    Returns:
        拆分结果，包含基础表、翻译表与外键。

    Raises:
        ConfigError: 配置缺失、冲突或非法。
    """
    parameters = table.behaviors.get(I18N_BEHAVIOR)
    if parameters is None:
        raise ConfigError(f"表 {table.name!r} 未声明 {I18N_BEHAVIOR} 行为")
    if not table.primary_key:
        raise ConfigError(f"表 {table.name!r} 没有主键，无法关联翻译表")

    config = LocaleConfig.from_parameters(parameters, default_locale=default_locale)
    translation_name = _translation_table_name(table, config)
    if translation_name == table.name:
        raise ConfigError(f"翻译表名不能与基础表同名: {table.name!r}")

    existing = database.get_table(translation_name) if database is not None else None
    if config.i18n_columns:
        split = _split_explicit(table, config)
    elif existing is not None:
        split = _split_symfony_compat(table, config, existing, parameters)
    else:
        raise ConfigError(
            f"表 {table.name!r} 既未声明 i18n_columns，也不存在既有翻译表 {translation_name!r}"
        )

    _check_partition(table, split)
    logger.info(
        "i18n 表拆分完成",
        table=table.name,
        translation_table=split.translation.name,
        columns=list(split.translatable_columns),
        symfony_compat=split.symfony_compat,
    )
    return split


class SchemaSplitter:
    """
    带缓存的拆分器：同一处理过程内，每张表只拆分一次。

    拆分结果取决于源表定义，以及 schema 中同名的既有翻译表（symfony 兼容模式）；
    两者都未变化时复用缓存结果，任一变化时重新拆分。
    """

    def __init__(self, *, default_locale: str | None = None):
        self._default_locale = default_locale
        self._cache: dict[str, tuple[I18nSplit, TableSpec | None]] = {}

    @staticmethod
    def _existing_translation(split: I18nSplit, database: DatabaseSpec | None) -> TableSpec | None:
        if database is None:
            return None
        return database.get_table(split.translation.name)

    def _cached(self, table: TableSpec, database: DatabaseSpec | None) -> I18nSplit | None:
        entry = self._cache.get(table.name)
        if entry is None:
            return None
        split, existing = entry
        if split.source != table or self._existing_translation(split, database) != existing:
            return None
        return split

    def split(self, table: TableSpec, database: DatabaseSpec | None = None) -> I18nSplit:
        cached = self._cached(table, database)
        if cached is not None:
            return cached
        split = split_table(table, database=database, default_locale=self._default_locale)
        self._cache[table.name] = (split, self._existing_translation(split, database))
        return split

    def split_database(self, database: DatabaseSpec) -> dict[str, I18nSplit]:
        """
        拆分 schema 中所有声明了 i18n 行为的表。

        任一表出错即中止整个过程：既不返回也不缓存部分结果。
        """
        results: dict[str, I18nSplit] = {}
        for table in database.tables:
            if not table.has_behavior(I18N_BEHAVIOR):
                continue
            cached = self._cached(table, database)
            if cached is not None:
                results[table.name] = cached
            else:
                results[table.name] = split_table(
                    table, database=database, default_locale=self._default_locale
                )
        self._cache.update(
            (name, (split, self._existing_translation(split, database)))
            for name, split in results.items()
        )
        return results

    def get(self, table_name: str) -> I18nSplit | None:
        entry = self._cache.get(table_name)
        return entry[0] if entry is not None else None
