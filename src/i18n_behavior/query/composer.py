# src/i18n_behavior/query/composer.py
"""
Query Composer：为拆分后的实体构建查询。

- join_i18n / join_with_i18n：按固定语言连接翻译表，语言作为绑定参数，
  而不是逐行比较；join_with_i18n 同时选出翻译列，在物化结果时预先挂载，
  读取可翻译字段时不再访问存储（避免 N+1 查询）；
- use_i18n_query / end_use：在嵌套作用域中对翻译列设置过滤和排序条件，
  end_use 时以 AND 合并回父查询。

所有构建方法都返回新对象，查询计划本身不可变、不做 I/O，可并发共享。
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

import structlog
from sqlalchemy import Select, Table, and_, select
from sqlalchemy.sql.expression import FromClause

from ..exceptions import QueryCompositionError, UnknownFieldError
from ..runtime.records import TranslationRecord

if TYPE_CHECKING:
    from ..runtime.records import TranslatableRecord
    from ..runtime.resolver import TranslationResolver
    from ..schema.tables import I18nTables
    from ..schema.types import I18nSplit

logger = structlog.get_logger(__name__)


class JoinType(str, Enum):
    LEFT = "LEFT"
    INNER = "INNER"


@dataclass(frozen=True, eq=False)
class TranslationJoin:
    """一次对翻译表的连接：别名、固定语言、连接方式与是否用于物化。"""

    alias: str
    locale: str
    join_type: JoinType
    table: FromClause
    hydrate: bool = False

    def label(self, column: str) -> str:
        return f"{self.alias}__{column}"


class EntityQuery:
    """基础实体的查询构建器。"""

    def __init__(
        self,
        base_table: Table,
        split: Optional["I18nSplit"] = None,
        translation_table: Optional[Table] = None,
    ):
        self._base = base_table
        self._split = split
        self._translation = translation_table
        self._joins: tuple[TranslationJoin, ...] = ()
        self._criteria: tuple[Any, ...] = ()
        self._order_by: tuple[Any, ...] = ()
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    @classmethod
    def for_tables(cls, tables: "I18nTables") -> "EntityQuery":
        return cls(tables.base, tables.split, tables.translation)

    def _clone(self, **changes: Any) -> "EntityQuery":
        clone = copy.copy(self)
        for key, value in changes.items():
            setattr(clone, f"_{key}", value)
        return clone

    # ---- 只读视图 ----

    @property
    def c(self):
        """基础表的列集合。"""
        return self._base.c

    @property
    def split(self) -> Optional["I18nSplit"]:
        return self._split

    @property
    def joins(self) -> tuple[TranslationJoin, ...]:
        return self._joins

    def get_join(self, alias: str) -> Optional[TranslationJoin]:
        return next((j for j in self._joins if j.alias == alias), None)

    # ---- 基础条件 ----

    def where(self, *criteria: Any) -> "EntityQuery":
        return self._clone(criteria=self._criteria + criteria)

    def _column(self, name: str):
        if name not in self._base.c:
            if self._split is not None and self._split.is_translatable(name):
                raise QueryCompositionError(
                    f"{name!r} 是可翻译列，请通过 use_i18n_query() 过滤或排序"
                )
            raise UnknownFieldError(f"表 {self._base.name!r} 没有列 {name!r}")
        return self._base.c[name]

    def filter_by(self, **values: Any) -> "EntityQuery":
        return self.where(*(self._column(name) == value for name, value in values.items()))

    def order_by(self, *clauses: Any) -> "EntityQuery":
        resolved = tuple(self._column(c) if isinstance(c, str) else c for c in clauses)
        return self._clone(order_by=self._order_by + resolved)

    def limit(self, limit: Optional[int]) -> "EntityQuery":
        return self._clone(limit=limit)

    def offset(self, offset: Optional[int]) -> "EntityQuery":
        return self._clone(offset=offset)

    # ---- 翻译连接 ----

    def _require_i18n(self) -> "I18nSplit":
        if self._split is None or self._translation is None:
            raise QueryCompositionError(f"表 {self._base.name!r} 没有生成的翻译关系")
        return self._split

    def _add_join(
        self,
        locale: Optional[str],
        alias: Optional[str],
        join_type: JoinType,
        *,
        hydrate: bool,
    ) -> tuple["EntityQuery", TranslationJoin]:
        split = self._require_i18n()
        locale = locale or split.default_locale
        alias = alias or split.translation_type_name
        join_type = JoinType(join_type)

        existing = self.get_join(alias)
        if existing is not None:
            if existing.locale != locale or existing.join_type is not join_type:
                raise QueryCompositionError(
                    f"别名 {alias!r} 已按 {existing.locale!r}/{existing.join_type.value} 连接，"
                    f"不能再按 {locale!r}/{join_type.value} 连接"
                )
            if hydrate and not existing.hydrate:
                upgraded = replace(existing, hydrate=True)
                joins = tuple(upgraded if j is existing else j for j in self._joins)
                return self._clone(joins=joins), upgraded
            return self, existing

        join = TranslationJoin(
            alias=alias,
            locale=locale,
            join_type=join_type,
            table=self._translation.alias(alias),
            hydrate=hydrate,
        )
        return self._clone(joins=self._joins + (join,)), join

    def join_i18n(
        self,
        locale: Optional[str] = None,
        alias: Optional[str] = None,
        join_type: JoinType = JoinType.LEFT,
    ) -> "EntityQuery":
        """
        连接翻译表：基础主键 = 所属键 且 语言列 = 绑定的 locale。

        LEFT（默认）保留没有该语言翻译的基础行；INNER 只保留有翻译的行。
        """
        query, _ = self._add_join(locale, alias, join_type, hydrate=False)
        return query

    def join_with_i18n(
        self, locale: Optional[str] = None, join_type: JoinType = JoinType.LEFT
    ) -> "EntityQuery":
        """连接翻译表并选出翻译列，物化时预先挂载到每条记录上。"""
        query, _ = self._add_join(locale, None, join_type, hydrate=True)
        return query

    def use_i18n_query(
        self,
        locale: Optional[str] = None,
        alias: Optional[str] = None,
        join_type: Optional[JoinType] = None,
    ) -> "TranslationQuery":
        """
        打开对翻译表的嵌套查询作用域，调用 end_use() 返回父查询。

        别名已连接时复用该连接，语言必须一致；未指定 join_type 时沿用已有连接
        的方式，显式指定且与已有连接不同则报错。新建连接默认为 INNER。
        """
        split = self._require_i18n()
        alias = alias or split.translation_type_name
        existing = self.get_join(alias)
        if existing is not None:
            if existing.locale != (locale or split.default_locale):
                raise QueryCompositionError(
                    f"别名 {alias!r} 已按语言 {existing.locale!r} 连接"
                )
            if join_type is not None and JoinType(join_type) is not existing.join_type:
                raise QueryCompositionError(
                    f"别名 {alias!r} 已按 {existing.join_type.value} 连接，"
                    f"不能再按 {JoinType(join_type).value} 连接"
                )
            return TranslationQuery(self, existing)
        query, join = self._add_join(
            locale, alias, join_type or JoinType.INNER, hydrate=False
        )
        return TranslationQuery(query, join)

    def _merge(
        self, join: TranslationJoin, criteria: tuple[Any, ...], order_by: tuple[Any, ...]
    ) -> "EntityQuery":
        if self.get_join(join.alias) is not join:
            raise QueryCompositionError(f"别名 {join.alias!r} 不属于当前查询")
        return self._clone(
            criteria=self._criteria + criteria,
            order_by=self._order_by + order_by,
        )

    # ---- 生成与物化 ----

    def build(self) -> Select:
        """生成 SELECT 语句；翻译列以 `<别名>__<列名>` 为标签。"""
        columns: list[Any] = list(self._base.c)
        from_clause: FromClause = self._base
        for join in self._joins:
            split = self._require_i18n()
            onclause = and_(
                *(
                    join.table.c[owner] == self._base.c[key]
                    for key, owner in split.owner_key_map().items()
                ),
                join.table.c[split.locale_column] == join.locale,
            )
            from_clause = from_clause.join(
                join.table, onclause, isouter=join.join_type is JoinType.LEFT
            )
            if join.hydrate:
                columns.extend(col.label(join.label(col.name)) for col in join.table.c)

        stmt = select(*columns).select_from(from_clause)
        if self._criteria:
            stmt = stmt.where(*self._criteria)
        if self._order_by:
            stmt = stmt.order_by(*self._order_by)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        if self._offset is not None:
            stmt = stmt.offset(self._offset)
        return stmt

    def hydrate(
        self,
        rows: Iterable[Mapping[str, Any]],
        record_class: type["TranslatableRecord"],
        resolver: Optional["TranslationResolver"] = None,
    ) -> list["TranslatableRecord"]:
        """
        把结果行物化为记录。

        对每个用于物化的连接：命中时挂载翻译记录，未命中时把该语言标记为
        已知不存在；记录的当前语言设置为最后一个物化连接的语言。
        """
        hydrating = [j for j in self._joins if j.hydrate]
        split = self._split
        records: list["TranslatableRecord"] = []
        for row in rows:
            record = record_class._from_storage(row, resolver)
            for join in hydrating:
                owner_key = tuple(row[join.label(name)] for name in split.owner_columns)
                if any(value is None for value in owner_key):
                    record._mark_absent(join.locale)
                    continue
                values = {
                    name: row[join.label(name)] for name in split.translatable_columns
                }
                record._attach_translation(
                    TranslationRecord(split, join.locale, owner_key, values, is_new=False)
                )
            if hydrating:
                record.set_locale(hydrating[-1].locale)
            records.append(record)
        logger.debug(
            "查询结果已物化",
            table=self._base.name,
            count=len(records),
            locales=[j.locale for j in hydrating],
        )
        return records


class TranslationQuery:
    """翻译表上的嵌套查询作用域。"""

    def __init__(
        self,
        parent: EntityQuery,
        join: TranslationJoin,
        criteria: tuple[Any, ...] = (),
        order_by: tuple[Any, ...] = (),
    ):
        self._parent = parent
        self._join = join
        self._criteria = criteria
        self._order_by = order_by

    @property
    def c(self):
        """翻译表别名的列集合，可在父查询的 where 中组合使用。"""
        return self._join.table.c

    @property
    def locale(self) -> str:
        return self._join.locale

    def _column(self, name: str):
        if name not in self._join.table.c:
            raise UnknownFieldError(f"翻译表 {self._join.alias!r} 没有列 {name!r}")
        return self._join.table.c[name]

    def where(self, *criteria: Any) -> "TranslationQuery":
        return TranslationQuery(
            self._parent, self._join, self._criteria + criteria, self._order_by
        )

    def filter_by(self, **values: Any) -> "TranslationQuery":
        return self.where(*(self._column(name) == value for name, value in values.items()))

    def order_by(self, *clauses: Any) -> "TranslationQuery":
        resolved = tuple(self._column(c) if isinstance(c, str) else c for c in clauses)
        return TranslationQuery(
            self._parent, self._join, self._criteria, self._order_by + resolved
        )

    def end_use(self) -> EntityQuery:
        """把嵌套条件以 AND 合并到父查询并返回父查询。"""
        return self._parent._merge(self._join, self._criteria, self._order_by)
