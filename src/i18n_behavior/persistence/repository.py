# src/i18n_behavior/persistence/repository.py
"""拆分实体（基础表 + 翻译表）仓库的 SQLAlchemy 实现。"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Optional

import structlog
from sqlalchemy import delete, insert, select, update

from ..exceptions import ResolutionError
from ..query.composer import EntityQuery
from ..runtime.accessors import build_record_class
from ..runtime.records import TranslatableRecord, TranslationRecord
from ..runtime.resolver import TranslationResolver

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from ..schema.tables import I18nTables
    from ..schema.types import I18nSplit

logger = structlog.get_logger(__name__)


class SqlAlchemyTranslatableRepository:
    """
    基础记录与其翻译记录的持久化。

    同时实现 TranslationLoader 协议，作为解析器的持久化协作方。
    """

    def __init__(
        self,
        session: "Session",
        tables: "I18nTables",
        record_class: Optional[type[TranslatableRecord]] = None,
    ):
        self._session = session
        self._tables = tables
        self._resolver = TranslationResolver(tables.split, loader=self)
        self._record_class = record_class or build_record_class(tables.split)

    @property
    def split(self) -> "I18nSplit":
        return self._tables.split

    @property
    def record_class(self) -> type[TranslatableRecord]:
        return self._record_class

    @property
    def resolver(self) -> TranslationResolver:
        return self._resolver

    # ---- 读取 ----

    def create(self, **values: Any) -> TranslatableRecord:
        """新建一条绑定到本仓库的记录（尚未保存）。"""
        record = self._record_class()
        record.bind(self._resolver)
        for name, value in values.items():
            record.set(name, value)
        return record

    def find_pk(self, *key: Any) -> Optional[TranslatableRecord]:
        stmt = select(self._tables.base).where(*self._tables.key_clause(key))
        row = self._session.execute(stmt).mappings().one_or_none()
        if row is None:
            return None
        return self._record_class._from_storage(row, self._resolver)

    def fetch_translation(
        self, split: "I18nSplit", owner_key: tuple, locale: str
    ) -> Optional[Mapping[str, Any]]:
        translation = self._tables.translation
        stmt = select(translation).where(
            *self._tables.owner_clause(owner_key),
            translation.c[split.locale_column] == locale,
        )
        return self._session.execute(stmt).mappings().one_or_none()

    def query(self) -> EntityQuery:
        return EntityQuery.for_tables(self._tables)

    def execute(self, query: EntityQuery) -> list[TranslatableRecord]:
        """执行查询并物化为绑定到本仓库的记录。"""
        rows = self._session.execute(query.build()).mappings().all()
        return query.hydrate(rows, self._record_class, self._resolver)

    # ---- 写入 ----

    def save(self, record: TranslatableRecord) -> TranslatableRecord:
        """
        保存基础记录及其翻译：
        1. 插入或更新基础行，插入得到的主键回填到记录；
        2. 主键被修改时，把已存储的翻译行级联到新主键；
        3. 把推迟关联的翻译记录关联到该主键；
        4. 删除标记移除的语言行；
        5. 插入新翻译、更新已修改的翻译。
        """
        if record.is_deleted:
            raise ResolutionError(f"{type(record).__name__} 已被删除，不能再保存")
        record.bind(self._resolver)
        previous = record.persisted_key
        self._save_base(record)

        key = record.primary_key
        if key is None:
            raise ResolutionError(f"{type(record).__name__} 保存后仍没有主键")
        if previous is not None and previous != key:
            self._cascade_key(previous, key)

        translation = self._tables.translation
        for locale in sorted(record.pending_removals):
            self._session.execute(
                delete(translation).where(
                    *self._tables.owner_clause(key),
                    translation.c[self.split.locale_column] == locale,
                )
            )
        for item in record.translations.values():
            if item.owner_key != key:
                item.link(key)
            self._save_translation(item)

        record._mark_persisted()
        logger.debug(
            "记录已保存",
            table=self._tables.base.name,
            key=key,
            locales=sorted(record.translations),
        )
        return record

    def _save_base(self, record: TranslatableRecord) -> None:
        base = self._tables.base
        if record.is_new:
            values = {
                name: record._values[name]
                for name in self.split.base_columns
                if record._values.get(name) is not None
            }
            result = self._session.execute(insert(base).values(**values))
            inserted = result.inserted_primary_key or ()
            for name, value in zip(self.split.key_columns, inserted):
                if value is not None:
                    record._values[name] = value
            return
        if record.primary_key is None:
            raise ResolutionError(f"{type(record).__name__} 的主键不能被置空")
        changed = {name: record._values[name] for name in record.modified_columns}
        if changed:
            # 以存储中的主键定位，主键本身可能正在被修改
            where = self._tables.key_clause(record.persisted_key or record.primary_key)
            self._session.execute(update(base).where(*where).values(**changed))

    def _cascade_key(self, previous: tuple, key: tuple) -> None:
        """
        把翻译行的所属键从旧主键改为新主键。

        外键声明了 ON UPDATE CASCADE；数据库已执行级联时这里不会再匹配到行，
        未强制外键的连接则由这里完成同样的修改。
        """
        self._session.execute(
            update(self._tables.translation)
            .where(*self._tables.owner_clause(previous))
            .values(**dict(zip(self.split.owner_columns, key)))
        )
        logger.debug(
            "主键已变更，翻译行随之级联",
            table=self._tables.base.name,
            previous=previous,
            key=key,
        )

    def _save_translation(self, item: TranslationRecord) -> None:
        translation = self._tables.translation
        split = self.split
        if item.is_new:
            values = dict(zip(split.owner_columns, item.owner_key))
            values[split.locale_column] = item.locale
            values.update(item.values)
            self._session.execute(insert(translation).values(**values))
        elif item.is_modified:
            changed = {name: item.values[name] for name in item.modified_columns}
            self._session.execute(
                update(translation)
                .where(
                    *self._tables.owner_clause(item.owner_key),
                    translation.c[split.locale_column] == item.locale,
                )
                .values(**changed)
            )
        item._mark_persisted()

    def delete(self, record: TranslatableRecord) -> None:
        """
        删除基础行及其全部翻译行，内存中已挂载的翻译记录随之解除关联。

        所属键同时是翻译表复合主键的一部分，不能被置空；因此翻译行在删除
        基础行之前显式删除，外键的 ON DELETE SET NULL 不会被触发。
        """
        key = record.persisted_key
        if record.is_new or key is None:
            raise ResolutionError(f"{type(record).__name__} 尚未保存，无法删除")
        result = self._session.execute(
            delete(self._tables.translation).where(*self._tables.owner_clause(key))
        )
        self._session.execute(delete(self._tables.base).where(*self._tables.key_clause(key)))
        for item in record.translations.values():
            item.link(None)
        record.is_deleted = True
        logger.debug(
            "记录已删除",
            table=self._tables.base.name,
            key=key,
            translations=result.rowcount,
        )
